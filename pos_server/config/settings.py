from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # 数据库配置
    database_url: str = "duckdb://./pos_server/data/restaurant_pos.duckdb"

    # API配置
    api_title: str = "Webmeister360AI POS API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api"

    # 开发模式
    debug: bool = False
    log_level: str = "INFO"

    # 点单默认值
    default_tax_rate: float = 0.08
    default_dish_price: float = 10.00
    default_dish_category: str = "New Dishes"
    placeholder_image: str = "https://placehold.co/100x100.png"

    # 餐桌与配送员
    table_count: int = 10
    drivers: List[str] = ["Alice Rider", "Bob Swift", "Charlie Dash", "Diana Zoom"]

    # 菜单CSV文件位置
    menu_csv_path: str = "./download/Copy/menu.csv"

    # 大模型配置
    groq_api_key: Optional[str] = None
    llm_model_name: str = "meta-llama/llama-4-scout-17b-16e-instruct"
    llm_temperature: float = 0.2

    class Config:
        env_file = ".env"
        case_sensitive = False


# 全局设置实例
settings = Settings()
