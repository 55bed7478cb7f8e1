class SqlChunkError(Exception):
    pass


class ConfigurationError(SqlChunkError):
    pass


class NoStatementsError(SqlChunkError):
    pass


class ImportFailedError(SqlChunkError):
    def __init__(self, chunk_number: int, returncode: int, stderr: str = ""):
        self.chunk_number = chunk_number
        self.returncode = returncode
        self.stderr = stderr
        message = f"Importing chunk {chunk_number} failed with exit code {returncode}"
        if stderr:
            message += f": {stderr.strip()}"
        super().__init__(message)
