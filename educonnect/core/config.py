from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from enum import Enum


class Environment(str, Enum):

    """运行环境枚举"""
    TESTING = "testing"
    PRODUCTION = "production"


class Settings(BaseSettings):

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # 应用基础配置
    app_name: str = "EduConnect"
    app_version: str = "1.0.0"
    environment: Environment = Environment.TESTING
    debug: bool = True

    # 数据库配置
    database_url: Optional[str] = None
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "educonnect_db"
    db_user: str = "educonnect_user"
    db_password: str = "educonnect_password"

    # Redis配置 (课程详情缓存)
    redis_url: Optional[str] = None
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    # 支付服务配置 (Stripe Connect)
    stripe_secret_key: Optional[str] = None
    stripe_api_base: str = "https://api.stripe.com/v1"
    stripe_timeout: int = 30
    payment_currency: str = "usd"

    # 业务规则
    platform_fee_rate: float = 0.025  # 平台手续费 2.5%
    max_course_duration_hours: int = 5
    default_schedule_months: int = 3  # 课程未设置结束日期时默认排课3个月
    course_session_max_attendees: int = 100

    # 日志配置
    log_level: str = "INFO"

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def stripe_test_mode(self) -> bool:
        """测试密钥下转账走模拟流程"""
        return bool(self.stripe_secret_key) and "_test_" in self.stripe_secret_key

    @property
    def database_url_computed(self) -> str:
        """计算数据库URL"""
        if self.database_url:
            return self.database_url
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def redis_url_computed(self) -> str:
        """计算Redis URL"""
        if self.redis_url:
            return self.redis_url
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"


# 全局配置实例
settings = Settings()
