"""Base interface for remote menu connectors.

Connectors fetch a remote document and decode it into menu records; they never
touch local storage.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from menusync.sync.records import RemoteItemRecord


class BaseConnector(ABC):
    """Abstract connector interface.

    Implementations should be safe to construct without side effects and should
    not perform network calls until methods are invoked.
    """

    @abstractmethod
    async def fetch_records(self, endpoint: str) -> List[RemoteItemRecord]:
        """Fetch the document at `endpoint` and return its records in order.

        Implementations raise `menusync.exceptions.FetchError` for transport
        failures and `menusync.exceptions.DecodeError` for malformed documents.
        """
        raise NotImplementedError
