"""Ports (interfaces) used by the core and the feature modules.

Ports define the minimal contracts for chat delivery, record storage and
snapshot backups so features can be reused with different backends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from core.models import ConversationRef, MessageContext


@dataclass
class Fact:
    """One factoid record: ``key be value [and also value ...]``."""

    key: str
    be: str = "is"
    reply: bool = False
    value: List[str] = field(default_factory=list)


class Sweepable(Protocol):
    """Anything holding time-bounded entries the expiry sweeper can evict."""

    def sweep_expired(self) -> int:
        ...


class ChatPort(Protocol):
    """Outbound chat operations required by the feature modules."""

    async def reply(self, conversation: ConversationRef, text: str) -> None:
        ...


class FactStore(Protocol):
    """Factoid persistence, partitioned by chat scope."""

    def get_fact(self, scope: str, store_key: str) -> Optional[Fact]:
        ...

    def put_fact(self, scope: str, store_key: str, fact: Fact) -> None:
        ...

    def delete_facts(self, scope: str, store_keys: List[str]) -> int:
        ...

    def load_facts(self, scope: str) -> Dict[str, Fact]:
        ...

    def replace_facts(self, scope: str, facts: Dict[str, Fact]) -> None:
        ...


class KarmaStore(Protocol):
    """Karma persistence, partitioned by chat scope."""

    def get_karma(self, scope: str, name: str) -> int:
        ...

    def add_karma(self, scope: str, name: str, delta: int) -> int:
        ...


class BackupStore(Protocol):
    """Snapshot files for factoid backup and restore."""

    def write_backup(self, scope: str, facts: Dict[str, Fact], label: str = "") -> str:
        ...

    def list_backups(self, scope: str) -> List[str]:
        ...

    def backup_path(self, scope: str, filename: str) -> Optional[str]:
        ...

    def read_backup(self, scope: str, path: str) -> Dict[str, Fact]:
        ...


class FeaturePort(Protocol):
    """A feature module as seen by the message router."""

    name: str

    async def handle(self, message: MessageContext) -> None:
        ...
