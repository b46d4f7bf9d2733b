import logging
from dataclasses import replace
from typing import Callable, Dict, Optional

from models import ClientAccount

logger = logging.getLogger(__name__)


class AccountLedger:
    """
    Owns every client account.
    Accounts are created on first access and changed only through update().
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def get_or_create(self, client_id: int) -> ClientAccount:
        """Get existing account or create a zeroed one."""
        account = self._accounts.get(client_id)
        if account is None:
            account = ClientAccount(client_id=client_id)
            self._accounts[client_id] = account
            logger.debug(f"Opened account for client {client_id}")
        return account

    def get(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def update(self, client_id: int, mutation: Callable[[ClientAccount], None]) -> ClientAccount:
        """
        Apply mutation to a staged copy of the account and commit it.

        If the mutation raises, or leaves negative funds behind, the stored
        account is untouched and the error propagates.
        """
        staged = replace(self.get_or_create(client_id))
        mutation(staged)
        staged.check_invariants()
        self._accounts[client_id] = staged
        return staged

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
