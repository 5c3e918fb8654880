class DeployError(RuntimeError):
    """A deploy stage failed in a way the pipeline can report."""


class GeneratorError(DeployError):
    def __init__(self, message: str, returncode: int | None = None, output: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class PublishError(DeployError):
    pass


__all__ = ["DeployError", "GeneratorError", "PublishError"]
