from fastapi import APIRouter, Depends

from app.api.dependencies import require_admin, require_db
from app.cqrs.commands import dollar as dollar_commands
from app.cqrs.queries import dollar as dollar_queries
from app.models.schemas import DollarPriceIn, DollarPriceOut, DollarPriceUpdateResponse

router = APIRouter(prefix="/dollar", tags=["dollar"])


@router.get("", response_model=DollarPriceOut)
def get_dollar_price():
    require_db()
    return dollar_queries.get_dollar_price()


@router.put("", response_model=DollarPriceUpdateResponse, dependencies=[Depends(require_admin)])
def update_dollar_price(payload: DollarPriceIn):
    require_db()
    return dollar_commands.update_dollar_price(payload)
