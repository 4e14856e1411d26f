"""
通用文档仓库
每个实体对应一张表，提供按ID的增删改查和按字段等值查询。
每次操作使用独立的短会话并立即提交，多个写操作可以并发执行。
"""

import logging
import uuid
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import async_sessionmaker

from educonnect.core.database import Base, get_session_maker

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class DocumentRepository(Generic[ModelT]):
    """按主键存取的文档仓库基类"""

    db_model: Type[Base]
    model: Type[ModelT]
    id_field: str

    def __init__(self, session_maker: Optional[async_sessionmaker] = None):
        self._session_maker = session_maker

    @property
    def session_maker(self) -> async_sessionmaker:
        # 未显式传入时使用全局会话工厂，延迟到首次使用时获取
        return self._session_maker or get_session_maker()

    @property
    def _id_column(self):
        return getattr(self.db_model, self.id_field)

    def _column(self, field: str):
        if field not in self.db_model.__table__.columns:
            raise ValueError(f"{self.db_model.__tablename__} 不存在字段: {field}")
        return getattr(self.db_model, field)

    def _clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """只保留表中存在的列，枚举转为存储值"""
        columns = self.db_model.__table__.columns
        cleaned = {}
        for key, value in data.items():
            if key not in columns:
                continue
            cleaned[key] = value.value if isinstance(value, Enum) else value
        return cleaned

    def new_id(self) -> str:
        return uuid.uuid4().hex

    async def create(self, data: Dict[str, Any]) -> str:
        """写入一条记录，返回记录ID"""
        values = self._clean(data)
        if not values.get(self.id_field):
            values[self.id_field] = self.new_id()

        async with self.session_maker() as session:
            session.add(self.db_model(**values))
            await session.commit()

        logger.debug(f"{self.db_model.__tablename__} 新增记录: {values[self.id_field]}")
        return values[self.id_field]

    async def get(self, record_id: str) -> Optional[ModelT]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(self.db_model).where(self._id_column == record_id)
            )
            row = result.scalar_one_or_none()
        return self.to_model(row) if row is not None else None

    async def update(self, record_id: str, fields: Dict[str, Any]) -> bool:
        """
        按ID更新部分字段
        记录不存在时返回False
        """
        values = self._clean(fields)
        values.pop(self.id_field, None)
        if not values:
            return await self.get(record_id) is not None

        async with self.session_maker() as session:
            result = await session.execute(
                update(self.db_model)
                .where(self._id_column == record_id)
                .values(**values)
            )
            await session.commit()
        return result.rowcount > 0

    async def delete(self, record_id: str) -> bool:
        async with self.session_maker() as session:
            result = await session.execute(
                delete(self.db_model).where(self._id_column == record_id)
            )
            await session.commit()
        return result.rowcount > 0

    async def query_by_field(self, field: str, value: Any) -> List[ModelT]:
        """按单个字段等值查询"""
        column = self._column(field)
        if isinstance(value, Enum):
            value = value.value

        async with self.session_maker() as session:
            result = await session.execute(
                select(self.db_model).where(column == value)
            )
            rows = result.scalars().all()
        return [self.to_model(row) for row in rows]

    def to_model(self, row: Base) -> ModelT:
        """转换为Pydantic模型"""
        return self.model.model_validate(row, from_attributes=True)
