"""Flags of the ``generate-workflow`` command.

Each flag feeds one template variable.  The fields are declared once, in
order, and both flag registration and value collection are driven from that
list.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass


@dataclass(frozen=True)
class WorkflowField:
    dest: str
    variable: str
    flags: tuple[str, ...]
    help: str


WORKFLOW_FIELDS: tuple[WorkflowField, ...] = (
    WorkflowField("registry_name", "AZURECONTAINERREGISTRY", ("-r", "--registry-name"),
                  "specify the Azure container registry name"),
    WorkflowField("resource_group", "RESOURCEGROUP", ("-g", "--resource-group"),
                  "specify the Azure resource group of your ACR"),
    WorkflowField("cluster_name", "CLUSTERNAME", ("-c", "--cluster-name"),
                  "specify the AKS cluster name"),
    WorkflowField("cluster_resource_group", "CLUSTERRESOURCEGROUP",
                  ("-l", "--cluster-resource-group"),
                  "specify the Azure resource group of your AKS cluster"),
    WorkflowField("container_name", "CONTAINERNAME", ("--container-name",),
                  "specify the container image name"),
    WorkflowField("branch", "BRANCHNAME", ("-b", "--branch"),
                  "specify the Github branch to automatically deploy from"),
    WorkflowField("build_context_path", "BUILDCONTEXTPATH", ("-x", "--build-context-path"),
                  "specify the docker build context path"),
    WorkflowField("chart_path", "CHARTPATH", ("--chart-path",),
                  "specify the helm chart path"),
    WorkflowField("chart_override_path", "CHARTOVERRIDEPATH", ("--chart-override-path",),
                  "specify the helm values override file path"),
    WorkflowField("private_cluster", "PRIVATECLUSTER", ("-p", "--private-cluster"),
                  "specify if the AKS cluster is private"),
)


def add_workflow_arguments(parser: argparse.ArgumentParser) -> None:
    """Register one string option per workflow field on *parser*."""
    for field in WORKFLOW_FIELDS:
        parser.add_argument(*field.flags, dest=field.dest, default="", help=field.help)


def collect_field_values(namespace: argparse.Namespace | object) -> dict[str, str]:
    """Return ``{variable: value}`` for every field set to a non-empty value."""
    values: dict[str, str] = {}
    for field in WORKFLOW_FIELDS:
        value = getattr(namespace, field.dest, "") or ""
        if value:
            values[field.variable] = value
    return values
