"""REST API for the statistics dashboard."""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from chatbot.api.chat import message_to_dict
from chatbot.api.deps import require_account
from chatbot.core.database import get_session
from chatbot.core.errors import PersistenceError
from chatbot.models.account import Account
from chatbot.services.statistics import StatisticsAggregator

router = APIRouter()


@router.get("")
async def dashboard(
    account: Account = Depends(require_account),
    session: Session = Depends(get_session),
):
    stats = StatisticsAggregator(session)
    try:
        user_stats = stats.user_stats(account.id)  # type: ignore[arg-type]
        global_stats = stats.global_stats()
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    user_stats["recent_chats"] = [message_to_dict(m) for m in user_stats["recent_chats"]]
    return {"user_stats": user_stats, "global_stats": global_stats}
