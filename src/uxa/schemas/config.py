"""Configuration schemas — evaluator credentials and run options."""

from pydantic import BaseModel, Field

# Environment variable -> EvaluatorSettings field
REQUIRED_ENV_VARS: dict[str, str] = {
    "AZURE_OPENAI_ENDPOINT": "endpoint",
    "AZURE_OPENAI_API_KEY": "api_key",
    "AZURE_OPENAI_DEPLOYMENT": "deployment",
    "AZURE_OPENAI_API_VERSION": "api_version",
}


class EvaluatorSettings(BaseModel):
    """Connection settings for the Azure OpenAI evaluation endpoint.

    All four are required; they are read from the environment once at
    process start.
    """

    endpoint: str
    api_key: str = Field(repr=False)
    deployment: str
    api_version: str


class AuditOptions(BaseModel):
    """Tuning knobs, optionally loaded from a YAML file.

    Timeouts are in seconds and bound each pipeline stage so a hung
    collaborator cannot block the process.
    """

    output_directory: str = "./artifacts"

    # Playwright page.goto timeout
    navigation_timeout_ms: int = Field(default=30_000, gt=0)

    capture_timeout: float = Field(default=120.0, gt=0)
    inspect_timeout: float = Field(default=60.0, gt=0)
    evaluate_timeout: float = Field(default=180.0, gt=0)

    # Passed to the OpenAI client itself
    request_timeout: float = Field(default=120.0, gt=0)
