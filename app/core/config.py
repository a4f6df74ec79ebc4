from pydantic_settings import BaseSettings
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    PROJECT_NAME: str = "Photogram API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # Database settings
    DB_USERNAME: str = "photogram"
    DB_PASSWORD: str = ""
    DB_DATABASE: str = "photogram"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    SQLALCHEMY_DATABASE_URI: Optional[str] = None  # 지정 시 DB_* 설정보다 우선

    # Identity provider settings
    IDENTITY_JWT_KEY: str = ""  # HS* 알고리즘은 시크릿, RS* 알고리즘은 PEM 공개키
    IDENTITY_JWT_ALGORITHM: str = "RS256"
    IDENTITY_ISSUER: Optional[str] = None
    IDENTITY_API_URL: str = "https://api.clerk.com/v1"
    IDENTITY_SECRET_KEY: str = ""
    IDENTITY_API_TIMEOUT: float = 10.0
    SESSION_COOKIE_NAME: str = "__session"

    # AWS settings
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_REGION: str = "ap-northeast-2"
    AWS_BUCKET_NAME: str = "photogram-uploads"
    STORAGE_PREFIX: str = "uploads"

    # Media settings
    IMAGE_BASE_URL: str = ""  # CloudFront URL for post images
    POST_IMAGE_SIZE: int = 1080
    POST_IMAGE_QUALITY: int = 85

    def get_image_url(self, s3_key: Optional[str]) -> Optional[str]:
        """이미지 URL 생성 (IMAGE_BASE_URL 미설정 시 S3 퍼블릭 URL 사용)"""
        if not s3_key:
            return None
        if self.IMAGE_BASE_URL:
            return f"{self.IMAGE_BASE_URL.rstrip('/')}/{s3_key}"
        return f"https://{self.AWS_BUCKET_NAME}.s3.{self.AWS_REGION}.amazonaws.com/{s3_key}"

    @property
    def DATABASE_URL(self) -> str:
        if self.SQLALCHEMY_DATABASE_URI:
            return self.SQLALCHEMY_DATABASE_URI
        return f"mysql+pymysql://{self.DB_USERNAME}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_DATABASE}"

    class Config:
        case_sensitive = True
        env_file = ".env"

settings = Settings()
