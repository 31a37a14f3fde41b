"""
通话记录提取订单
所有字段都是尽力而为的，调用方在提交前必须重新校验
"""

import logging
from typing import Optional

from langchain_core.exceptions import OutputParserException
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.output_parsers import JsonOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import ValidationError as SchemaValidationError

from ...core.exceptions import AIAdapterError, ValidationError
from ...models.ai import ExtractedOrder
from ..llm import get_chat_model

logger = logging.getLogger(__name__)

order_parser = JsonOutputParser(pydantic_object=ExtractedOrder)

EXTRACT_SYSTEM_PROMPT = """
You are an order taker for a restaurant. Read the phone call transcript and extract the customer's order.

### RULES
1. Only report what the customer actually said. Leave a field out if it was not mentioned.
2. "orderType" must be one of "dine-in", "delivery" or "pickup".
3. List every dish the customer asked for under "items" with its "name" and integer "quantity".
4. Put special requests (allergies, spice level, timing) in "notes".
5. "confidenceScore" is a number between 0 and 1 describing how sure you are about the extraction.

### OUTPUT FORMAT (JSON ONLY)
Return a valid JSON object. Do not add markdown like ```json.
{{
    "orderType": "delivery",
    "customerName": "Jane Doe",
    "customerPhone": "555-1234",
    "customerAddress": "123 Main St",
    "items": [{{"name": "Margherita Pizza", "quantity": 2}}],
    "notes": "Extra napkins",
    "confidenceScore": 0.9
}}
"""

extract_prompt = ChatPromptTemplate.from_messages([
    ("system", EXTRACT_SYSTEM_PROMPT),
    ("human", "Transcript:\n{transcript}"),
])


async def extract_order_from_text(transcript: str,
                                  llm: Optional[BaseChatModel] = None) -> ExtractedOrder:
    """
    从通话记录中提取订单

    Raises:
        ValidationError: 通话记录为空
        AIAdapterError: 模型调用失败或返回结构不合法
    """
    if not (transcript or "").strip():
        raise ValidationError("请输入通话记录")

    chain = extract_prompt | (llm or get_chat_model()) | order_parser
    try:
        output = await chain.ainvoke({"transcript": transcript})
    except OutputParserException as e:
        raise AIAdapterError("AI did not return a structured order.", {"reason": str(e)})
    except Exception as e:
        logger.error("Order extraction failed: %s", e)
        raise AIAdapterError(f"Could not process transcript: {e}")

    if not isinstance(output, dict):
        raise AIAdapterError("AI did not return a structured order.")
    try:
        return ExtractedOrder.model_validate(output)
    except SchemaValidationError as e:
        raise AIAdapterError("AI returned an order in an unexpected shape.",
                             {"errors": e.errors(include_url=False, include_context=False)})
