"""Factoids: chat-taught answers to "keyword?" questions.

Destructive operations (forget, overwrite, bulk cleanup, restore) are two-step:
the first message parks a pending action, a second message confirms or
cancels it. Each flow uses its own pending-action kind so they never collide.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import re
from typing import Iterable, List, Optional, Tuple

from core.config import RateLimitRule
from core.dispatch import RuleSpec
from core.models import MessageContext
from core.pending import PendingActionStore
from core.ports import BackupStore, ChatPort, Fact, FactStore
from core.rate_limit import RateLimiter, rate_limit_message
from features.base import Feature, rule

LOGGER = logging.getLogger(__name__)

FORGET_KIND = "forget-item"
UPDATE_KIND = "update-item"
CLEANUP_KIND = "bulk-cleanup"
RESTORE_KIND = "restore-snapshot"

QUERY = re.compile(r"^([^?!]+)[!?]$")
ANSWER = re.compile(r"^(YES|NO)$", re.IGNORECASE)
FORGET = re.compile(r"^forget\s+(.+)$", re.IGNORECASE)
SET = re.compile(r"^(.+?)\s+(is|are)\s+(.+)$", re.IGNORECASE | re.DOTALL)
LIST = re.compile(r"^!factoid:\s*list$", re.IGNORECASE)
CLEANUP = re.compile(r"^!factoid:\s*cleanup$", re.IGNORECASE)
CLEANUP_ANSWER = re.compile(r"^!factoid:\s*(confirm|cancel)-cleanup$", re.IGNORECASE)
BACKUP = re.compile(r"^!factoid:\s*backup$", re.IGNORECASE)
BACKUPS = re.compile(r"^!factoid:\s*backups$", re.IGNORECASE)
RESTORE = re.compile(r"^!factoid:\s*restore\s+(.+)$", re.IGNORECASE)
RESTORE_ANSWER = re.compile(r"^!factoid:\s*(confirm|cancel)-restore$", re.IGNORECASE)
UPDATE_ANSWER = re.compile(r"^!factoid:\s*(update|append|cancel-update)$", re.IGNORECASE)

_USER_KEY = re.compile(r"^@\w+$")
_REPLY_TAG = re.compile(r"^<reply>\s*", re.IGNORECASE)


@dataclass(frozen=True)
class ForgetRequest:
    scope: str
    store_key: str


@dataclass(frozen=True)
class UpdateRequest:
    scope: str
    store_key: str
    fact: Fact


@dataclass(frozen=True)
class CleanupRequest:
    scope: str
    keys: Tuple[str, ...]


@dataclass(frozen=True)
class RestoreRequest:
    scope: str
    path: str
    filename: str


def fact_string(fact: Fact) -> str:
    """Render a fact the way it is answered in chat."""

    if not fact.value:
        return ""
    first, *rest = fact.value
    text = first if fact.reply else f"{fact.key} {fact.be} {first}"
    for value in rest:
        text += f" and also {value}"
    return text


def clean_query(raw: str) -> str:
    """Trim the query and drop one pair of surrounding double quotes."""

    query = raw.strip()
    if len(query) > 2 and query.startswith('"') and query.endswith('"'):
        query = query[1:-1]
    return query.strip()


def is_invalid_key(store_key: str, fact: Fact) -> bool:
    """Keys created before commands were reserved, or otherwise unusable."""

    if _USER_KEY.match(fact.key) or _USER_KEY.match(store_key):
        return False
    key = fact.key
    return (
        "," in key
        or '"' in key
        or bool(re.match(r"^[!@#$%^&*()]", key))
        or len(key) > 100
    )


class FactoidsFeature(Feature):
    name = "factoids"

    def __init__(
        self,
        chat: ChatPort,
        store: FactStore,
        pending: PendingActionStore,
        backups: BackupStore,
        limiter: Optional[RateLimiter] = None,
        limit: Optional[RateLimitRule] = None,
    ) -> None:
        super().__init__(chat)
        self._store = store
        self._pending = pending
        self._backups = backups
        self._limiter = limiter
        self._limit = limit

    def rules(self) -> Iterable[RuleSpec]:
        yield rule(LIST.pattern, self.name, 1)
        yield rule(FORGET.pattern, self.name, 1)
        # Bare YES/NO is only ours while a forget is pending, so stay low.
        yield rule(ANSWER.pattern, self.name, 0.5)
        yield rule(QUERY.pattern, self.name, 1, flags=0)
        yield rule(CLEANUP.pattern, self.name, 1)
        yield rule(CLEANUP_ANSWER.pattern, self.name, 1)
        yield rule(BACKUP.pattern, self.name, 1)
        yield rule(RESTORE.pattern, self.name, 1)
        yield rule(RESTORE_ANSWER.pattern, self.name, 1)
        yield rule(BACKUPS.pattern, self.name, 1)
        yield rule(UPDATE_ANSWER.pattern, self.name, 1)

    async def handle(self, message: MessageContext) -> None:
        text = message.text.strip()

        commands = (
            (LIST, self._list),
            (CLEANUP, self._cleanup),
            (CLEANUP_ANSWER, self._cleanup_answer),
            (BACKUP, self._backup),
            (BACKUPS, self._list_backups),
            (RESTORE, self._restore),
            (RESTORE_ANSWER, self._restore_answer),
            (UPDATE_ANSWER, self._update_answer),
        )
        for pattern, handler in commands:
            match = pattern.match(text)
            if match:
                await handler(message, match)
                return

        query = QUERY.match(text)
        if query and await self._query(message, query.group(1)):
            return

        answer = ANSWER.match(text)
        if answer:
            await self._forget_answer(message, answer.group(1).upper())
            return

        # Teaching and forgetting require addressing the bot directly.
        if not message.is_mention:
            return

        forget = FORGET.match(text)
        if forget:
            await self._forget(message, forget.group(1).strip())
            return

        setter = SET.match(text)
        if setter:
            await self._set(message, setter.group(1).strip(), setter.group(2), setter.group(3).strip())

    # -- queries ---------------------------------------------------------

    async def _query(self, message: MessageContext, raw_query: str) -> bool:
        store_key = clean_query(raw_query).lower()
        if not store_key:
            return False
        fact = self._store.get_fact(message.scope, store_key)
        if fact is None:
            return False
        # Only answered lookups count against the limit.
        if self._limiter is not None and self._limit is not None:
            if not self._limiter.check(message.requester_id, self._limit):
                remaining = self._limiter.remaining_seconds(message.requester_id, self._limit.identifier)
                await self.say(message, rate_limit_message(remaining))
                return True
        await self.say(message, fact_string(fact))
        return True

    async def _list(self, message: MessageContext, _match: re.Match) -> None:
        facts = self._store.load_facts(message.scope)
        if not facts:
            await self.say(message, "No factoids stored yet.")
            return
        names = [facts[key].key for key in sorted(facts)]
        await self.say(message, f"Available factoids: {', '.join(names)}")

    # -- set / update ----------------------------------------------------

    async def _set(self, message: MessageContext, key: str, be: str, value: str) -> None:
        if not key:
            return
        # Never shadow another module's command with a factoid.
        if self.registry.matches_any(key):
            LOGGER.info("Skipping factoid creation for command that matches another plugin: %r", key)
            return

        reply = bool(_REPLY_TAG.match(value))
        if reply:
            value = _REPLY_TAG.sub("", value).strip()
        fact = Fact(key=key, be=be.strip().lower() or "is", reply=reply, value=[value])
        store_key = key.lower()

        existing = self._store.get_fact(message.scope, store_key)
        if existing is None:
            self._store.put_fact(message.scope, store_key, fact)
            await self.say(message, "Got it!")
            return

        self._pending.create(
            message.requester_id,
            UPDATE_KIND,
            UpdateRequest(scope=message.scope, store_key=store_key, fact=fact),
            message.conversation,
        )
        await self.say(
            message,
            f'I already have a factoid for "{existing.key}". It says:\n"{fact_string(existing)}"\n\n'
            "Reply with `!factoid: update` to replace it, `!factoid: append` to add to it "
            "or `!factoid: cancel-update` to keep it as is.",
        )

    async def _update_answer(self, message: MessageContext, match: re.Match) -> None:
        choice = match.group(1).lower()
        if choice == "cancel-update":
            if self._pending.cancel(message.requester_id, UPDATE_KIND):
                await self.say(message, "❌ Cancelled - keeping the existing factoid.")
            else:
                await self.say(message, "No pending factoid update found.")
            return

        pending = self._pending.confirm(message.requester_id, UPDATE_KIND)
        if pending is None:
            await self.say(message, "No pending factoid update found.")
            return

        request: UpdateRequest = pending.payload
        if choice == "update":
            self._store.put_fact(request.scope, request.store_key, request.fact)
            await self.say(message, f'✅ Updated! New factoid is:\n"{fact_string(request.fact)}"')
            return

        existing = self._store.get_fact(request.scope, request.store_key)
        if existing is None:
            merged = request.fact
        else:
            merged = replace(existing, value=existing.value + request.fact.value)
        self._store.put_fact(request.scope, request.store_key, merged)
        await self.say(message, f'✅ Appended! Updated factoid is now:\n"{fact_string(merged)}"')

    # -- forget ----------------------------------------------------------

    def _find_key(self, scope: str, raw_key: str) -> Optional[str]:
        for candidate in (raw_key, raw_key.lower()):
            if self._store.get_fact(scope, candidate) is not None:
                return candidate
        return None

    async def _forget(self, message: MessageContext, raw_key: str) -> None:
        if not raw_key:
            return
        store_key = self._find_key(message.scope, raw_key)
        fact = self._store.get_fact(message.scope, store_key) if store_key else None
        if store_key is None or fact is None:
            await self.say(message, f'I don\'t know anything about "{raw_key}"')
            return

        self._pending.create(
            message.requester_id,
            FORGET_KIND,
            ForgetRequest(scope=message.scope, store_key=store_key),
            message.conversation,
        )
        await self.say(
            message,
            f'Are you sure you want me to forget the factoid "{fact.key}" which is: '
            f'"{fact_string(fact)}"? Say YES, or NO',
        )

    async def _forget_answer(self, message: MessageContext, answer: str) -> None:
        if answer == "NO":
            pending = self._pending.confirm(message.requester_id, FORGET_KIND)
            if pending is None:
                return
            await self.say(message, f'Okay, I\'ll keep the factoid for "{pending.payload.store_key}".')
            return

        pending = self._pending.confirm(message.requester_id, FORGET_KIND)
        if pending is None:
            return
        request: ForgetRequest = pending.payload
        if self._store.delete_facts(request.scope, [request.store_key]):
            await self.say(message, f'Okay, I have forgotten about "{request.store_key}"')
        else:
            await self.say(message, f'I don\'t know anything about "{request.store_key}"')

    # -- bulk cleanup ----------------------------------------------------

    async def _cleanup(self, message: MessageContext, _match: re.Match) -> None:
        facts = self._store.load_facts(message.scope)
        if not facts:
            await self.say(message, "No factoids stored yet.")
            return

        invalid = [key for key, fact in facts.items() if is_invalid_key(key, fact)]
        if not invalid:
            await self.say(message, "No invalid factoids found that need cleanup.")
            return

        self._pending.create(
            message.requester_id,
            CLEANUP_KIND,
            CleanupRequest(scope=message.scope, keys=tuple(invalid)),
            message.conversation,
        )
        listing = "`, `".join(invalid)
        await self.say(
            message,
            f"I found {len(invalid)} factoids that don't match valid patterns.\n"
            f"These will be removed: `{listing}`\n\n"
            'Reply with "!factoid: confirm-cleanup" to proceed or "!factoid: cancel-cleanup" to cancel.',
        )

    async def _cleanup_answer(self, message: MessageContext, match: re.Match) -> None:
        if match.group(1).lower() == "cancel":
            if self._pending.cancel(message.requester_id, CLEANUP_KIND):
                await self.say(message, "Cleanup cancelled.")
            else:
                await self.say(message, "No pending cleanup request found.")
            return

        pending = self._pending.confirm(message.requester_id, CLEANUP_KIND)
        if pending is None:
            await self.say(message, "No pending cleanup request found. Start with `!factoid: cleanup` first.")
            return
        request: CleanupRequest = pending.payload
        removed = self._store.delete_facts(request.scope, list(request.keys))
        LOGGER.info("Cleanup removed %s factoids in %s", removed, request.scope)
        await self.say(message, f"Successfully removed {removed} invalid factoids.")

    # -- backup / restore ------------------------------------------------

    async def _backup(self, message: MessageContext, _match: re.Match) -> None:
        try:
            filename = self._backups.write_backup(message.scope, self._store.load_facts(message.scope))
        except OSError as exc:
            LOGGER.exception("Error creating factoids backup")
            await self.say(message, f"❌ Error creating backup: {exc}")
            return
        await self.say(message, f"✅ Backup created successfully: `{filename}`")

    async def _list_backups(self, message: MessageContext, _match: re.Match) -> None:
        try:
            files: List[str] = self._backups.list_backups(message.scope)
        except OSError as exc:
            LOGGER.exception("Error listing factoid backups")
            await self.say(message, f"❌ Error listing backups: {exc}")
            return
        if not files:
            await self.say(message, "No factoid backups found for this chat.")
            return
        listing = "\n".join(f"• `{name}`" for name in files)
        await self.say(
            message,
            f"Available factoid backups:\n{listing}\n\n"
            "To restore from a backup, use: `!factoid: restore FILENAME`",
        )

    async def _restore(self, message: MessageContext, match: re.Match) -> None:
        filename = match.group(1).strip()
        path = self._backups.backup_path(message.scope, filename)
        if path is None:
            await self.say(
                message,
                f"❌ Backup file `{filename}` not found. Use `!factoid: backups` to see available backups.",
            )
            return

        try:
            # Snapshot the current state first so a restore can itself be undone.
            self._backups.write_backup(message.scope, self._store.load_facts(message.scope), label="pre_restore")
        except OSError as exc:
            LOGGER.exception("Error preparing restore")
            await self.say(message, f"❌ Error preparing restore: {exc}")
            return

        self._pending.create(
            message.requester_id,
            RESTORE_KIND,
            RestoreRequest(scope=message.scope, path=path, filename=filename),
            message.conversation,
        )
        await self.say(
            message,
            f"⚠️ WARNING: You are about to restore factoids from backup `{filename}`.\n\n"
            "This will replace ALL current factoids with the ones from the backup. "
            "A backup of your current factoids has been created automatically.\n\n"
            "Reply with `!factoid: confirm-restore` to proceed or `!factoid: cancel-restore` to cancel.",
        )

    async def _restore_answer(self, message: MessageContext, match: re.Match) -> None:
        if match.group(1).lower() == "cancel":
            if self._pending.cancel(message.requester_id, RESTORE_KIND):
                await self.say(message, "Restore cancelled.")
            else:
                await self.say(message, "No pending restore request found.")
            return

        pending = self._pending.confirm(message.requester_id, RESTORE_KIND)
        if pending is None:
            await self.say(
                message,
                "No pending restore request found. Start with `!factoid: restore FILENAME` first.",
            )
            return

        request: RestoreRequest = pending.payload
        try:
            facts = self._backups.read_backup(request.scope, request.path)
        except ValueError:
            await self.say(message, "❌ Invalid backup file format. Restore cancelled.")
            return
        except OSError as exc:
            LOGGER.exception("Error restoring from backup")
            await self.say(message, f"❌ Error restoring from backup: {exc}")
            return

        self._store.replace_facts(request.scope, facts)
        await self.say(
            message,
            f"✅ Successfully restored factoids from backup `{request.filename}`.\n\n"
            f"Restored {len(facts)} factoids.",
        )
