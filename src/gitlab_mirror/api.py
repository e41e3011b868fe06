#!/usr/bin/env python3
"""
Minimal GitLab REST client used to discover groups and projects.

Listings are fetched page by page; a page shorter than ``per_page`` is the
last one, so the endpoint must honour the usual REST pagination contract.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .exceptions import ApiError
from .models import Group, Repository


class GitLabApi:
    """Read-only access to the group and project listing endpoints."""

    API_PREFIX = '/api/v4'

    def __init__(self, gitlab_url: str, access_token: Optional[str] = None, per_page: int = 100,
                 timeout: float = 30, session: Optional[requests.Session] = None):
        """
        Initialize the API client.

        Args:
            gitlab_url: Base URL of the GitLab instance
            access_token: GitLab API access token, sent as a bearer token
            per_page: Page size requested from listing endpoints
            timeout: Timeout in seconds for every request
            session: Optional pre-configured requests session
        """
        self.gitlab_url = gitlab_url.rstrip('/')
        self.per_page = per_page
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'Content-Type': 'application/json'})
        if access_token:
            self.session.headers.update({'Authorization': f'Bearer {access_token}'})
        self.logger = logging.getLogger('gitlab_mirror.api')

    @staticmethod
    def group_endpoint(group_id: Any) -> str:
        """Build the endpoint for a group ID or a full group path."""
        return f"/groups/{quote(str(group_id), safe='')}"

    def request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Issue a GET request and return the decoded JSON payload.

        Raises:
            ApiError: if the request fails or the payload is an error object
        """
        url = f"{self.gitlab_url}{self.API_PREFIX}{endpoint}"
        self.logger.debug(f"GET {endpoint} {params or ''}")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise ApiError(f"request failed: {e}", endpoint=endpoint) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise ApiError(f"invalid JSON response (HTTP {response.status_code})",
                           endpoint=endpoint, status_code=response.status_code) from e

        if isinstance(payload, dict) and ('message' in payload or 'error' in payload):
            message = payload.get('message') or payload.get('error')
            raise ApiError(str(message), endpoint=endpoint, status_code=response.status_code)

        if not response.ok:
            raise ApiError(f"HTTP {response.status_code}", endpoint=endpoint, status_code=response.status_code)

        return payload

    def fetch_all(self, endpoint: str) -> List[Dict[str, Any]]:
        """
        Fetch every item of a paginated listing endpoint.

        Args:
            endpoint: Listing endpoint relative to the API prefix

        Returns:
            All items in listing order

        Raises:
            ApiError: if any page is an error object
        """
        items: List[Dict[str, Any]] = []
        page = 1

        while True:
            batch = self.request(endpoint, params={'page': page, 'per_page': self.per_page})
            if not batch:
                break
            if not isinstance(batch, list):
                raise ApiError(f"unexpected listing payload of type {type(batch).__name__}", endpoint=endpoint)

            items.extend(batch)

            # A short page is the last one
            if len(batch) < self.per_page:
                break
            page += 1

        self.logger.debug(f"{endpoint}: {len(items)} items in {page} page(s)")
        return items

    def get_group(self, group_id: Any) -> Group:
        """Resolve group metadata by numeric ID or full path."""
        payload = self.request(self.group_endpoint(group_id))
        if not isinstance(payload, dict) or 'id' not in payload:
            raise ApiError("unexpected group payload", endpoint=self.group_endpoint(group_id))
        return Group.from_api(payload)

    def list_projects(self, group_id: Any) -> List[Repository]:
        """List the projects directly inside a group."""
        endpoint = f"{self.group_endpoint(group_id)}/projects"
        return [Repository.from_api(item) for item in self.fetch_all(endpoint)]

    def list_subgroups(self, group_id: Any) -> List[Any]:
        """List the IDs of the direct subgroups of a group."""
        endpoint = f"{self.group_endpoint(group_id)}/subgroups"
        return [item['id'] for item in self.fetch_all(endpoint)]
