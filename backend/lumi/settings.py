from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")
	gemini_timeout_seconds: float = Field(default=60, validation_alias="GEMINI_TIMEOUT_SECONDS")
	# Longer uploads are truncated before being sent to the generator
	max_content_chars: int = Field(default=20000, validation_alias="MAX_CONTENT_CHARS")

	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=120, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# Lesson sequencing knobs
	lesson_flashcard_repeat: int = Field(default=3, validation_alias="LESSON_FLASHCARD_REPEAT")
	lesson_question_repeat: int = Field(default=2, validation_alias="LESSON_QUESTION_REPEAT")
	lesson_small_pool_threshold: int = Field(default=28, validation_alias="LESSON_SMALL_POOL_THRESHOLD")
	lesson_small_pool_flashcards: int = Field(default=4, validation_alias="LESSON_SMALL_POOL_FLASHCARDS")
	lesson_large_pool_flashcards: int = Field(default=8, validation_alias="LESSON_LARGE_POOL_FLASHCARDS")
	lesson_questions_per_kind: int = Field(default=2, validation_alias="LESSON_QUESTIONS_PER_KIND")
	lesson_question_step: int = Field(default=4, validation_alias="LESSON_QUESTION_STEP")

	# Planet theme data; None means the bundled data/planet_themes.json
	planet_themes_path: str | None = Field(default=None, validation_alias="PLANET_THEMES_PATH")

	# Featured courses are the ones published by this account
	featured_course_owner: str | None = Field(default=None, validation_alias="FEATURED_COURSE_OWNER")
	featured_course_limit: int = Field(default=8, validation_alias="FEATURED_COURSE_LIMIT")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
