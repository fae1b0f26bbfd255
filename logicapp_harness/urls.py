# Copyright (c) 2025 Microsoft Corporation.
# Licensed under the MIT License. See LICENSE file in the project root.
"""
URL construction for the local workflow runtime.

Resolves trigger callback URLs and builds the management API request URLs.
Nothing here performs network I/O.
"""
from typing import Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from logicapp_harness.config import HostEnvironment
from logicapp_harness.errors import DuplicateQueryParameterError
from logicapp_harness.models import CallbackUrl


def merge_queries(callback_url: CallbackUrl, query_params: Optional[Dict[str, str]]) -> None:
    """
    Add query parameters to the callback URL.

    Every key is checked before any is added, so a clash leaves the
    stored queries untouched.
    """
    if not query_params:
        return

    duplicates = [key for key in query_params if key in callback_url.queries]
    if duplicates:
        raise DuplicateQueryParameterError(
            f"Query parameter(s) already present on the callback URL: {', '.join(duplicates)}"
        )

    callback_url.queries.update(query_params)


def resolve(
    callback_url: CallbackUrl,
    query_params: Optional[Dict[str, str]] = None,
    relative_path: Optional[str] = None,
) -> str:
    """
    Build the URL used to invoke a workflow trigger.

    Args:
        callback_url: Definition returned by listCallbackUrl
        query_params: Extra query parameters, merged into the stored queries
        relative_path: Path appended to the base path; must already be URL-encoded

    Returns:
        Absolute URL with the relative path and all queries applied.
    """
    if relative_path:
        relative_path = relative_path.lstrip("/")

    merge_queries(callback_url, query_params)

    base_path = callback_url.base_path
    if relative_path:
        if not base_path.endswith("/"):
            base_path += "/"
        base_path += relative_path

    scheme, netloc, path, _, fragment = urlsplit(base_path)
    return urlunsplit((scheme, netloc, path, callback_url.query_string, fragment))


def _env(env: Optional[HostEnvironment]) -> HostEnvironment:
    return env if env is not None else HostEnvironment.default()


def trigger_callback_url(
    flow_name: str,
    trigger_name: str,
    env: Optional[HostEnvironment] = None,
) -> str:
    """URL of the listCallbackUrl operation for a workflow trigger."""
    env = _env(env)
    return (
        f"{env.workflow_management_base_url}/{flow_name}/triggers/{trigger_name}"
        f"/listCallbackUrl?api-version={env.api_version}"
    )


def runs_url(
    flow_name: str,
    top: Optional[int] = None,
    env: Optional[HostEnvironment] = None,
) -> str:
    """URL listing a workflow's runs, on the management host."""
    env = _env(env)
    url = (
        f"{env.workflow_management_base_url_with_management_host}/{flow_name}"
        f"/runs?api-version={env.api_version}"
    )
    if top is not None:
        url += f"&$top={top}"
    return url


def run_actions_url(
    flow_name: str,
    run_name: str,
    env: Optional[HostEnvironment] = None,
) -> str:
    env = _env(env)
    return (
        f"{env.workflow_management_base_url}/{flow_name}/runs/{run_name}"
        f"/actions?api-version={env.api_version}"
    )


def run_action_repetitions_url(
    flow_name: str,
    run_name: str,
    action_name: str,
    env: Optional[HostEnvironment] = None,
) -> str:
    env = _env(env)
    return (
        f"{env.workflow_management_base_url}/{flow_name}/runs/{run_name}"
        f"/actions/{action_name}/repetitions?api-version={env.api_version}"
    )
