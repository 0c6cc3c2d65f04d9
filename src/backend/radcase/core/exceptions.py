"""
业务异常定义

服务层抛出，由 API 路由转换为 HTTPException。
"""


class RadCaseError(Exception):
    """业务异常基类"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AttemptValidationError(RadCaseError):
    """请求缺少必填字段（如答题记录没有 case_id）"""

    status_code = 400


class AuthenticationRequiredError(RadCaseError):
    """需要学员身份但请求未提供"""

    status_code = 401


class CaseNotFoundError(RadCaseError):
    """引用的病例不存在"""

    status_code = 404

    def __init__(self, case_id: str):
        super().__init__(f"Case not found: {case_id}")
        self.case_id = case_id
