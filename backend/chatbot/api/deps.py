"""Shared request dependencies: caller identity and chat services."""

import logging

from fastapi import Depends, Header, HTTPException
from sqlmodel import Session

from chatbot.core.database import get_session
from chatbot.models.account import Account
from chatbot.services.conversation import ConversationService
from chatbot.services.message_store import MessageStore
from chatbot.services.responder import ResponseGenerator

logger = logging.getLogger(__name__)


def get_current_account(
    x_user_id: str | None = Header(None),
    session: Session = Depends(get_session),
) -> Account | None:
    """Resolve the gateway-supplied X-User-Id header. Unknown ids are anonymous."""
    if not x_user_id:
        return None
    try:
        account_id = int(x_user_id)
    except ValueError:
        logger.debug(f"Ignoring non-numeric X-User-Id {x_user_id!r}")
        return None
    account = session.get(Account, account_id)
    if account is None:
        logger.debug(f"Unknown account {account_id} in X-User-Id, treating as anonymous")
    return account


def require_account(account: Account | None = Depends(get_current_account)) -> Account:
    if account is None:
        logger.debug("Rejecting anonymous request to an account-only route")
        raise HTTPException(status_code=401, detail="Authentication required")
    return account


def get_responder() -> ResponseGenerator:
    return ResponseGenerator()


def get_conversation_service(
    session: Session = Depends(get_session),
    responder: ResponseGenerator = Depends(get_responder),
) -> ConversationService:
    return ConversationService(MessageStore(session), responder)
