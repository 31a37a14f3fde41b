"""
支付路由模块
"""

from fastapi import APIRouter, Depends

from ...schemas.payment import PaymentQuoteRequest, PaymentRequest
from ...core.context import get_current_user_id
from ...core.error_handler import create_success_response
from ...services.payment_service import payment_service

router = APIRouter()


@router.post("/quote")
def quote_payment(req: PaymentQuoteRequest, user_id: str = Depends(get_current_user_id)):
    """计算待支付订单的账单（含小费）"""
    bill = payment_service.quote_order(user_id, req.order_id, req.tip_amount)
    return create_success_response(bill.to_storage(), "查询成功")


@router.post("")
def process_payment(req: PaymentRequest, user_id: str = Depends(get_current_user_id)):
    """
    支付订单

    现金支付时实收不足会返回 400 且订单保持 Pending；
    支付成功后订单变为 Completed，堂食桌台被释放
    """
    result = payment_service.process_payment(
        user_id,
        req.order_id,
        req.payment_method,
        tip_amount=req.tip_amount,
        amount_paid=req.amount_paid,
    )
    return create_success_response(result.to_storage(), "支付成功")
