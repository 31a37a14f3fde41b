"""
原料清单生成
根据菜名和份数生成原料、数量和单位；模型没有返回结构化结果时整体失败，不返回部分结果
"""

import logging
from typing import Optional

from langchain_core.exceptions import OutputParserException
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.output_parsers import JsonOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import ValidationError as SchemaValidationError

from ...core.exceptions import AIAdapterError, ValidationError
from ...models.ai import IngredientsList
from ..llm import get_chat_model

logger = logging.getLogger(__name__)

ingredients_parser = JsonOutputParser(pydantic_object=IngredientsList)

INGREDIENTS_SYSTEM_PROMPT = """
You are a chef. Generate a list of ingredients needed for the dish "{dish_name}" for {number_of_servings} servings.
For each ingredient, provide its name, quantity (as a number), and unit (e.g., "g", "ml", "pcs", "kg").
Return the output as a JSON object with a single key "ingredients".
The "ingredients" key should have a value of an array of objects, where each object has "name" (string), "quantity" (number), and "unit" (string) fields.
Be as accurate as possible. For example:
{{
  "ingredients": [
    {{ "name": "Spaghetti", "quantity": 500, "unit": "g" }},
    {{ "name": "Guanciale", "quantity": 150, "unit": "g" }},
    {{ "name": "Eggs", "quantity": 4, "unit": "pcs" }}
  ]
}}
Ensure the output strictly follows this JSON format. Do not add markdown.
"""

ingredients_prompt = ChatPromptTemplate.from_messages([
    ("system", INGREDIENTS_SYSTEM_PROMPT),
    ("human", "Dish: {dish_name}\nServings: {number_of_servings}"),
])


async def generate_ingredients_list(dish_name: str, number_of_servings: int,
                                    llm: Optional[BaseChatModel] = None) -> IngredientsList:
    """
    生成原料清单

    Raises:
        ValidationError: 菜名为空或份数小于1
        AIAdapterError: 模型调用失败或返回结构不合法
    """
    dish_name = (dish_name or "").strip()
    if not dish_name:
        raise ValidationError("请输入菜品名称")
    if number_of_servings < 1:
        raise ValidationError("份数必须大于0", {"number_of_servings": number_of_servings})

    chain = ingredients_prompt | (llm or get_chat_model()) | ingredients_parser
    try:
        output = await chain.ainvoke({
            "dish_name": dish_name,
            "number_of_servings": number_of_servings,
        })
    except OutputParserException as e:
        raise AIAdapterError("AI did not return an output.", {"reason": str(e)})
    except Exception as e:
        logger.error("Ingredient generation for %s failed: %s", dish_name, e)
        raise AIAdapterError(f"Could not generate ingredients: {e}")

    if not output:
        raise AIAdapterError("AI did not return an output.")
    try:
        return IngredientsList.model_validate(output)
    except SchemaValidationError as e:
        raise AIAdapterError("AI returned ingredients in an unexpected shape.",
                             {"errors": e.errors(include_url=False, include_context=False)})
