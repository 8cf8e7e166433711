"""
数据库连接模块

管理数据库引擎的创建。表结构通过 Alembic 迁移管理，不要在这里建表。
使用前确保已导入 marketplace.models，否则表之间的外键关系无法解析。
"""
from sqlmodel import create_engine

from marketplace.core.config import settings

# create_engine 只创建连接池，不会立即连接数据库
engine = create_engine(str(settings.SQLALCHEMY_DATABASE_URI), pool_pre_ping=True)
