"""
大模型辅助路由模块
大模型结果只作为建议返回，确认后才经点单状态机提交
"""

from fastapi import APIRouter, Depends

from ...ai.flows import extract_order_from_text, generate_ingredients_list
from ...schemas.ai import (
    ConfirmSuggestedOrderRequest,
    ExtractOrderRequest,
    GenerateIngredientsRequest,
)
from ...core.context import get_current_user_id
from ...core.error_handler import create_success_response
from ...services.order_composer import OrderComposer

router = APIRouter()


@router.post("/ingredients")
async def generate_ingredients(req: GenerateIngredientsRequest,
                               user_id: str = Depends(get_current_user_id)):
    """根据菜名生成原料清单"""
    result = await generate_ingredients_list(req.dish_name, req.number_of_servings)
    return create_success_response(result.to_storage(), "原料清单已生成")


@router.post("/extract-order")
async def extract_order(req: ExtractOrderRequest, user_id: str = Depends(get_current_user_id)):
    """
    从通话记录提取订单

    返回的条目已与当前菜单匹配，未匹配的条目只做标记
    """
    extracted = await extract_order_from_text(req.transcript)
    composer = OrderComposer(user_id)
    suggestion = composer.apply_suggestion(extracted)
    return create_success_response(suggestion.to_storage(), "订单信息已提取")


@router.post("/orders/confirm")
def confirm_suggested_order(req: ConfirmSuggestedOrderRequest,
                            user_id: str = Depends(get_current_user_id)):
    """确认大模型建议的订单，用户填写的字段覆盖提取结果"""
    composer = OrderComposer(user_id)
    composer.apply_suggestion(req.extracted)
    composer.set_details(
        order_type=req.order_type,
        table_id=req.table_id,
        customer_name=req.customer_name,
        customer_phone=req.customer_phone,
        customer_address=req.customer_address,
        driver_name=req.driver_name,
        notes=req.notes,
    )
    order = composer.submit()
    return create_success_response(order.to_storage(), "订单已提交")
