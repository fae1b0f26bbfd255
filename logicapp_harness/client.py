# Copyright (c) 2025 Microsoft Corporation.
# Licensed under the MIT License. See LICENSE file in the project root.
"""
HTTP client for the local workflow runtime.

Issues requests against the URLs built in logicapp_harness.urls.
Non-2xx responses raise httpx.HTTPStatusError.
"""
import logging
from typing import Dict, List, Optional

import httpx

from logicapp_harness.config import HostEnvironment
from logicapp_harness.models import CallbackUrl
from logicapp_harness import urls

DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)


class ManagementClient:
    """Triggers workflows and reads their run history from a running host."""

    def __init__(
        self,
        env: Optional[HostEnvironment] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.env = env or HostEnvironment.default()
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)

    def __enter__(self) -> "ManagementClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def get_callback_url(self, flow_name: str, trigger_name: str) -> CallbackUrl:
        """Fetch the callback URL definition for a workflow trigger."""
        response = self._client.post(urls.trigger_callback_url(flow_name, trigger_name, self.env))
        response.raise_for_status()
        return CallbackUrl.from_dict(response.json())

    def trigger_workflow(
        self,
        callback_url: CallbackUrl,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        query_params: Optional[Dict[str, str]] = None,
        relative_path: Optional[str] = None,
        method: Optional[str] = None,
    ) -> httpx.Response:
        """
        Invoke a workflow trigger.

        The response is returned as-is; workflows often answer with
        non-2xx codes on purpose.
        """
        url = urls.resolve(callback_url, query_params, relative_path)
        method = method or callback_url.method
        logging.info(f"Triggering workflow: {method} {url}")
        return self._client.request(method, url, content=content, headers=headers)

    def list_runs(self, flow_name: str, top: Optional[int] = None) -> List[dict]:
        return self._get_values(urls.runs_url(flow_name, top, self.env))

    def get_run_actions(self, flow_name: str, run_name: str) -> List[dict]:
        return self._get_values(urls.run_actions_url(flow_name, run_name, self.env))

    def get_action_repetitions(self, flow_name: str, run_name: str, action_name: str) -> List[dict]:
        return self._get_values(
            urls.run_action_repetitions_url(flow_name, run_name, action_name, self.env)
        )

    def _get_values(self, url: str) -> List[dict]:
        """GET a management collection and return its `value` array."""
        response = self._client.get(url)
        response.raise_for_status()
        return response.json().get("value", [])
