class JudgeError(Exception):
    pass


class UnsupportedLanguage(JudgeError, ValueError):

    def __init__(self, language):
        super().__init__(f'Unsupported language: {language}')
        self.language = language


class InvalidRequest(JudgeError, ValueError):
    pass


class SubmissionIdNotFoundError(JudgeError):
    pass


class DuplicatedSubmissionIdError(JudgeError):
    pass
