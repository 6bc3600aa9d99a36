class AppraisalError(Exception):
    """Base class for errors raised by the appraisal services."""
    status_code = 400
    default_message = "Appraisal error."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class SignatureRequired(AppraisalError):
    default_message = "Please add your signature to your profile before submitting the evaluation."


class EvaluationLocked(AppraisalError):
    status_code = 409
    default_message = "Evaluation already submitted."


class SubmissionConflict(AppraisalError):
    status_code = 409
    default_message = "This evaluation is already being submitted."


class SubmissionBackendError(AppraisalError):
    """The submission backend refused or failed; message is shown verbatim."""
    status_code = 502
    default_message = "Failed to submit evaluation."
