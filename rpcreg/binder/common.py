"""Interface and data structures shared by all binder client implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from rpcreg.address import AddressDescriptor


class BinderError(RuntimeError):
    """Exception raised when the binder library can't be used at all."""


@dataclass
class Mapping:
    """A single (program, version, transport) to address entry known to rpcbind."""

    program: int
    version: int
    netid: str
    uaddr: str
    owner: str = ""


class Binder(ABC):
    """
    Client of the system RPC binder (rpcbind/portmap).

    Individual calls report failure through their return value: the cause of a failure
    (duplicate registration, unsupported transport, rpcbind not running, insufficient
    permissions) is not distinguished.
    """

    @abstractmethod
    def unregister(self, netid: Optional[str], program: int, version: int) -> bool:
        """
        Withdraw the registration of a program version.

        A netid of None withdraws the registration on all transports.
        """

    @abstractmethod
    def register(
        self, netid: str, program: int, version: int, address: AddressDescriptor
    ) -> bool:
        """Register a program version on a transport with the specified address."""

    def dump(self) -> List[Mapping]:
        """
        Retrieve all registrations known to the binder.

        Raises BinderError if the registrations can't be retrieved.
        """
        raise BinderError(f"{self.__class__.__name__} does not support listing")
