"""
病例服务测试
更新、删除、搜索分页与建表
"""
import pytest
from sqlalchemy import inspect

from radcase.core.exceptions import AttemptValidationError, CaseNotFoundError
from radcase.models import Case, QuizAttempt, UserCaseProgress, init_db
from radcase.services import CaseService, ReviewService


class TestUpdateCase:
    """更新病例"""

    def test_only_given_fields_change(self, db_session, make_case):
        case = make_case("Old Title", diagnosis="Old Diagnosis")

        updated = CaseService.update_case(db_session, case.id, title="  New Title  ", findings="Air-fluid level")

        assert updated.title == "New Title"
        assert updated.findings == "Air-fluid level"
        assert updated.diagnosis == "Old Diagnosis"
        assert updated.updated_at is not None

    def test_unknown_fields_ignored(self, db_session, make_case):
        case = make_case()
        original_id = case.id

        CaseService.update_case(db_session, case.id, id="hijacked", created_at=None)

        assert db_session.get(Case, original_id) is not None
        assert db_session.get(Case, "hijacked") is None

    def test_blank_title_rejected(self, db_session, make_case):
        case = make_case("Keep Me")

        with pytest.raises(AttemptValidationError):
            CaseService.update_case(db_session, case.id, title=" ")

        db_session.refresh(case)
        assert case.title == "Keep Me"

    def test_missing_case(self, db_session):
        with pytest.raises(CaseNotFoundError):
            CaseService.update_case(db_session, "missing", title="X")


class TestDeleteCase:
    """删除病例"""

    def test_cascades_to_progress_and_attempts(self, db_session, make_user, make_case):
        user = make_user()
        case = make_case()
        case_id = case.id
        ReviewService.record_attempt(db_session, case_id, True, user_id=user.id)
        ReviewService.record_attempt(db_session, case_id, False)

        CaseService.delete_case(db_session, case_id)

        assert db_session.get(Case, case_id) is None
        assert db_session.query(UserCaseProgress).count() == 0
        assert db_session.query(QuizAttempt).count() == 0

    def test_missing_case(self, db_session):
        with pytest.raises(CaseNotFoundError):
            CaseService.delete_case(db_session, "missing")


class TestListCases:
    """搜索与分页"""

    def test_search_is_case_insensitive(self, db_session, make_case):
        match = make_case("Subdural Hematoma")
        make_case("Epiploic Appendagitis")

        result = CaseService.list_cases(db_session, search="SUBDURAL")

        assert [c.id for c in result["cases"]] == [match.id]
        assert result["total"] == 1

    def test_total_ignores_paging(self, db_session, make_case):
        for i in range(4):
            make_case(f"Case {i}")

        result = CaseService.list_cases(db_session, limit=1, offset=3)

        assert len(result["cases"]) == 1
        assert result["total"] == 4

    def test_offset_past_end(self, db_session, make_case):
        make_case()

        result = CaseService.list_cases(db_session, offset=10)

        assert result["cases"] == []
        assert result["total"] == 1


class TestInitDb:
    """建表"""

    def test_creates_all_tables(self, db_engine):
        init_db(bind=db_engine)

        tables = set(inspect(db_engine).get_table_names())
        assert {"cases", "users", "user_case_progress", "quiz_attempts"} <= tables

    def test_reset_clears_data(self, db_engine, db_session, make_case):
        make_case()
        db_session.close()

        init_db(bind=db_engine, reset=True)

        assert db_session.query(Case).count() == 0
