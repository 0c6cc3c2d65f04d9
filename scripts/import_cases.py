#!/usr/bin/env python3
"""
病例导入脚本
将病例JSON文件导入数据库（按标题去重）
"""
import sys
import json
import os
from pathlib import Path

# 添加项目路径
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / ".." / "src" / "backend"))

# Change to backend directory so relative paths work
os.chdir(project_root / ".." / "src" / "backend")

from sqlalchemy.orm import Session

from radcase.core.database import SessionLocal
from radcase.models import Case, init_db
from radcase.services import CaseService

CASE_FIELDS = (
    "modality",
    "body_part",
    "diagnosis",
    "difficulty",
    "clinical_history",
    "teaching_points",
    "findings",
)


def import_cases_from_json(json_file: str, db: Session, update_existing: bool = False) -> dict:
    """
    从JSON文件导入病例

    Args:
        json_file: JSON文件路径（对象或数组）
        db: 数据库会话
        update_existing: 标题已存在时是否覆盖

    Returns:
        dict: 导入统计
    """
    with open(json_file, 'r', encoding='utf-8') as f:
        cases_data = json.load(f)

    # 支持单个病例或病例列表
    if isinstance(cases_data, dict):
        cases_list = [cases_data]
    elif isinstance(cases_data, list):
        cases_list = cases_data
    else:
        raise ValueError("JSON格式错误：期望对象或数组")

    imported = 0
    updated = 0
    skipped = 0
    errors = []

    for c_data in cases_list:
        title = (c_data.get("title") or "").strip()
        if not title:
            errors.append(f"病例缺少标题: {c_data}")
            skipped += 1
            continue

        fields = {k: c_data[k] for k in CASE_FIELDS if k in c_data}
        existing = db.query(Case).filter(Case.title == title).first()
        if existing:
            if not update_existing:
                skipped += 1
                continue
            for key, value in fields.items():
                setattr(existing, key, value)
            db.commit()
            updated += 1
            continue

        CaseService.create_case(db, title, **fields)
        imported += 1

    return {
        "total": len(cases_list),
        "imported": imported,
        "updated": updated,
        "skipped": skipped,
        "errors": len(errors),
        "error_details": errors[:10],
    }


def main():
    import argparse

    parser = argparse.ArgumentParser(description='导入教学病例')
    parser.add_argument('--json-file', '-f', default=str(project_root / ".." / "data" / "sample_cases.json"),
                        help='JSON文件路径，默认导入 data/sample_cases.json')
    parser.add_argument('--update', '-u', action='store_true', help='标题已存在时覆盖病例内容')
    parser.add_argument('--init-db', '-i', action='store_true', help='初始化数据库表')
    args = parser.parse_args()

    if args.init_db:
        print("初始化数据库...")
        init_db()

    db = SessionLocal()
    try:
        print(f"\n从 {args.json_file} 导入病例...")
        result = import_cases_from_json(args.json_file, db, args.update)

        print("\n导入完成！")
        print(f"  总病例数: {result['total']}")
        print(f"  成功导入: {result['imported']}")
        print(f"  已更新: {result['updated']}")
        print(f"  跳过: {result['skipped']}")
        print(f"  错误: {result['errors']}")

        if result['error_details']:
            print("\n错误详情（前10个）:")
            for error in result['error_details']:
                print(f"  - {error}")

    except Exception as e:
        print(f"\n错误: {e}")
        db.rollback()
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
