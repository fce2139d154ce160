from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends

from instant_transfer.db import crud
from instant_transfer.logging_config import get_logger
from .deps import get_db
from .schemas import PartnerBankOut
from .serializers import serialize_partner_bank

logger = get_logger("instant_transfer.api.banks")

router = APIRouter(tags=["banks"])


@router.get("/partner-banks", response_model=List[PartnerBankOut])
async def list_partner_banks(db=Depends(get_db)):
    """
    List partner banks with their status and total prefunded float.
    """
    banks = await crud.list_partner_banks(db)
    pools = await crud.get_all_prefunded_accounts(db)
    totals = {}
    for p in pools:
        totals[p.bank_id] = totals.get(p.bank_id, Decimal("0")) + Decimal(p.balance)
    logger.info("Listing %d partner banks", len(banks))
    return [serialize_partner_bank(b, totals.get(b.bank_id)) for b in banks]
