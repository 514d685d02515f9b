from enum import Enum
from typing import Optional

from config.state import ConfirmationPolicy, UserStateStore
from core.contracts.models import CommandDecision
from utils.logger import logger

ALWAYS = "always"
NEVER = "never"
WILDCARD = "*"
POLICY_LISTS = (ALWAYS, NEVER)


class PolicyChoice(str, Enum):
    """The four answers offered after a command has been run."""

    ALWAYS_ANY = "Always ask before running any command"
    NEVER_ANY = "Never ask before running any command"
    ALWAYS_THIS = "Always ask before running this command"
    NEVER_THIS = "Never ask before running this command"


class ConfirmationPolicyStore:
    """
    Remembers which commands need approval (`always`) and which run unattended (`never`).

    The policy is read from the user state on every check and written back on
    every change; nothing is cached between calls.
    """

    def __init__(self, state: UserStateStore, key_mode: str = "message"):
        self.state = state
        self.key_mode = key_mode

    def load(self) -> ConfirmationPolicy:
        return self.state.get_confirmations()

    def key_for(self, decision: CommandDecision) -> str:
        """Returns the description a decision is remembered by."""
        if self.key_mode == "command" and decision.command:
            return " ".join(decision.command.split())
        return decision.message

    def matches(self, list_name: str, description: str) -> bool:
        """True if `description` is literally in the named list or the list holds the wildcard."""
        entries = getattr(self.load(), self._check_list(list_name))
        return description in entries or WILDCARD in entries

    def lookup(self, description: str) -> Optional[str]:
        """
        Returns the list that decides `description`, or None if neither does.

        Literal entries are checked before wildcards, and `always` before
        `never` at each step.
        """
        policy = self.load()
        for list_name in POLICY_LISTS:
            if description in getattr(policy, list_name):
                return list_name
        for list_name in POLICY_LISTS:
            if WILDCARD in getattr(policy, list_name):
                return list_name
        return None

    def requires_confirmation(self, description: str) -> bool:
        return self.lookup(description) != NEVER

    def add(self, list_name: str, description: str) -> ConfirmationPolicy:
        """Adds `description` to the named list unless it is already there."""
        list_name = self._check_list(list_name)
        policy = self.load()
        entries = getattr(policy, list_name)
        if description not in entries:
            entries.append(description)
            self.state.set_confirmations(policy)
            logger.info(f"Added '{description}' to the '{list_name}' confirmation list")
        return policy

    def set_wildcard(self, list_name: str) -> ConfirmationPolicy:
        """Makes the named list match every command and empties the other one."""
        list_name = self._check_list(list_name)
        policy = ConfirmationPolicy(**{list_name: [WILDCARD]})
        self.state.set_confirmations(policy)
        logger.info(f"Confirmation policy reset to '{list_name}' for every command")
        return policy

    def apply(self, choice: PolicyChoice, description: str) -> ConfirmationPolicy:
        if choice is PolicyChoice.ALWAYS_ANY:
            return self.set_wildcard(ALWAYS)
        if choice is PolicyChoice.NEVER_ANY:
            return self.set_wildcard(NEVER)
        if choice is PolicyChoice.ALWAYS_THIS:
            return self.add(ALWAYS, description)
        return self.add(NEVER, description)

    @staticmethod
    def _check_list(list_name: str) -> str:
        if list_name not in POLICY_LISTS:
            raise ValueError(f"Unknown confirmation list '{list_name}', expected one of {POLICY_LISTS}")
        return list_name
