"""Error taxonomy shared by the verification pipeline and the HTTP layer."""

from __future__ import annotations


class FaceLoginError(RuntimeError):
    """Base error carrying the HTTP status and a user-facing message."""

    status_code: int = 500
    default_message: str = "حدث خطأ غير متوقع"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return type(self).__name__


class InvalidImageInput(FaceLoginError):
    """Raised when the submitted payload is missing, too small, or not an image."""

    status_code = 400
    default_message = "بيانات الصورة غير صالحة"


class NoFaceDetected(FaceLoginError):
    """Raised when the presence check did not find one clear face."""

    status_code = 400
    default_message = (
        "لم يتم التعرف على وجه واضح في الصورة. تأكد من وجود إضاءة كافية وأن الوجه ظاهر بوضوح."
    )


class NoEnrollments(FaceLoginError):
    """Raised when no active descriptors exist at all."""

    status_code = 404
    default_message = "لا يوجد مستخدمون مسجلون بتسجيل الدخول بالوجه"


class NoMatch(FaceLoginError):
    """Raised when no candidate reached the acceptance threshold."""

    status_code = 404
    default_message = "لم يتم العثور على تطابق. تأكد من أنك سجلت وجهك مسبقاً."


class RateLimitExceeded(FaceLoginError):
    """Raised when a client IP has too many recent failed attempts."""

    status_code = 429
    default_message = "تم تجاوز الحد الأقصى للمحاولات. يرجى المحاولة لاحقاً."


class AccountLookupError(FaceLoginError):
    """Raised when the matched account has no usable auth-state record."""

    status_code = 500
    default_message = "خطأ في جلب بيانات المستخدم"


class SessionIssuanceError(FaceLoginError):
    """Raised when the identity backend did not yield both credentials."""

    status_code = 500
    default_message = "فشل في إنشاء الجلسة"


class PerceptionServiceError(FaceLoginError):
    """Raised when the perception service fails or answers malformed."""

    status_code = 500
    default_message = "خدمة تحليل الوجه غير متاحة حالياً"


class VerificationTimeout(FaceLoginError):
    """Raised when the whole attempt exceeded the configured deadline."""

    status_code = 504
    default_message = "انتهت مهلة التحقق من الوجه. يرجى المحاولة مرة أخرى."
