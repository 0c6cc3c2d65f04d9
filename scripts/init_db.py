#!/usr/bin/env python3
"""
数据库初始化脚本
创建所有数据库表，并报告目标数据库和表内数据量

用法:
    python scripts/init_db.py            # 建表（已存在的表不受影响）
    python scripts/init_db.py --reset    # 删除所有表后重建（会清空数据）
"""
import argparse
import os
import sys
from pathlib import Path

# Add src/backend to path
backend_dir = Path(__file__).parent / ".." / "src" / "backend"
sys.path.insert(0, str(backend_dir))

# Change to backend directory so relative paths work
os.chdir(str(backend_dir))

from dotenv import load_dotenv

load_dotenv()

from sqlalchemy import inspect, text

from radcase.core.database import DATABASE_URL, engine
from radcase.models import Base, init_db


def _mask_password(url: str) -> str:
    """隐藏连接串中的密码"""
    if "@" not in url or "://" not in url:
        return url
    scheme, rest = url.split("://", 1)
    credentials, host = rest.rsplit("@", 1)
    if ":" in credentials:
        credentials = credentials.split(":", 1)[0] + ":***"
    return f"{scheme}://{credentials}@{host}"


def report_tables():
    """打印每张表的行数"""
    existing = set(inspect(engine).get_table_names())
    with engine.connect() as conn:
        for table in Base.metadata.sorted_tables:
            if table.name not in existing:
                print(f"  {table.name}: 缺失")
                continue
            count = conn.execute(text(f"SELECT COUNT(*) FROM {table.name}")).scalar()
            print(f"  {table.name}: {count} 行")


def main():
    parser = argparse.ArgumentParser(description="初始化 RadCase 数据库")
    parser.add_argument("--reset", action="store_true", help="删除所有表后重建（会清空数据）")
    args = parser.parse_args()

    print(f"数据库: {_mask_password(DATABASE_URL)}")

    if args.reset:
        answer = input("将删除所有表和数据，确认继续? [y/N] ")
        if answer.strip().lower() != "y":
            print("已取消")
            return 1

    print("初始化数据库..." if not args.reset else "重建数据库...")
    init_db(reset=args.reset)

    print("表状态:")
    report_tables()
    print("完成！")
    return 0


if __name__ == "__main__":
    sys.exit(main())
