"""
Request dependencies: database session and the authenticated account.

Token validation happens in front of this service; it forwards the
authenticated account id in the ``ACCOUNT_HEADER`` header.
"""

import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from socialnet.config import ACCOUNT_HEADER
from socialnet.db import get_db
from socialnet.errors import Forbidden, Unauthorized
from socialnet.models import Account
from socialnet.services.accounts import touch_last_active

logger = logging.getLogger(__name__)


def get_current_account(
    x_account_id: Optional[str] = Header(None, alias=ACCOUNT_HEADER),
    db: Session = Depends(get_db),
) -> Account:
    """
    Resolve the calling account.

    Raises:
        Unauthorized: header missing, malformed, or naming an unknown account
        Forbidden: account is blocked
    """
    if not x_account_id or not x_account_id.strip().isdigit():
        raise Unauthorized("Authentication required")
    account = db.get(Account, int(x_account_id))
    if account is None:
        raise Unauthorized("Authentication required")
    if account.blocked:
        logger.warning("Blocked account %s rejected", account.id)
        raise Forbidden("Account is blocked")
    touch_last_active(db, account)
    return account


def get_admin_account(account: Account = Depends(get_current_account)) -> Account:
    if not account.is_admin:
        logger.warning("Non-admin account %s rejected from admin route", account.id)
        raise Forbidden("Admin access required")
    return account
