"""
EduConnect数据库表创建脚本
"""

import asyncio
import sys
from pathlib import Path

# 添加项目根目录到Python路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy import text
from educonnect.core.config import settings
from educonnect.core.database import Base

# 导入所有数据库模型以确保表被注册
import educonnect.models.database  # noqa: F401


async def create_database_if_not_exists():
    """创建数据库（如果不存在）"""
    # 连接到PostgreSQL服务器（不指定数据库）
    server_url = settings.database_url_computed.replace(f"/{settings.db_name}", "/postgres")

    engine = create_async_engine(server_url, isolation_level="AUTOCOMMIT")

    async with engine.connect() as conn:
        result = await conn.execute(
            text("SELECT 1 FROM pg_database WHERE datname = :db_name"),
            {"db_name": settings.db_name}
        )

        if not result.fetchone():
            await conn.execute(text(f"CREATE DATABASE {settings.db_name}"))
            print(f"数据库 '{settings.db_name}' 创建成功")
        else:
            print(f"数据库 '{settings.db_name}' 已存在")

    await engine.dispose()


async def create_tables():
    """创建所有数据表"""
    engine = create_async_engine(settings.database_url_computed)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        print("所有数据表创建成功")

    await engine.dispose()


async def create_indexes():
    """创建额外的索引"""
    engine = create_async_engine(settings.database_url_computed)

    indexes = [
        # 同一学生在同一课程下最多一条待处理申请
        "CREATE UNIQUE INDEX IF NOT EXISTS uq_course_requests_pending "
        "ON course_requests(course_id, student_id) WHERE status = 'pending';",
        "CREATE INDEX IF NOT EXISTS idx_course_requests_course_status ON course_requests(course_id, status);",

        # 日程表索引
        "CREATE INDEX IF NOT EXISTS idx_sessions_repetition_date ON sessions(repetition_id, date);",
        "CREATE INDEX IF NOT EXISTS idx_sessions_course_owner ON sessions(course_id, created_by);",

        # 支付表索引
        "CREATE INDEX IF NOT EXISTS idx_payments_instructor_time ON payments(instructor_id, created_at);",
        "CREATE INDEX IF NOT EXISTS idx_payments_transfer_pending ON payments(transfer_status) "
        "WHERE transfer_status = 'pending';",

        # 通知表索引
        "CREATE INDEX IF NOT EXISTS idx_notifications_recipient_time ON notifications(to_id, created_at);"
    ]

    async with engine.begin() as conn:
        for index_sql in indexes:
            await conn.execute(text(index_sql))
        print("所有索引创建成功")

    await engine.dispose()


async def main():
    """主函数"""
    print("开始创建EduConnect数据库表...")

    try:
        await create_database_if_not_exists()
        await create_tables()
        await create_indexes()
        print("EduConnect数据库初始化完成！")

    except Exception as e:
        print(f"数据库初始化失败: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
