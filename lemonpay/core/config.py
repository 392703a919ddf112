from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # MongoDB 접속 정보
    MONGODB_URI: str = "mongodb://mongodb:27017"
    MONGODB_DB_NAME: str = "lemonpay"

    # 병가/연차(sick/casual) 연간 한도
    ANNUAL_SICK_CASUAL_LIMIT: int = 12

    # True면 leave_usage 카운터로 동시 신청 레이스를 막는다 (기본은 재계산 방식만 사용)
    LEAVE_CAP_GUARD: bool = False

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"  # .env 파일을 통해 환경 변수 관리


settings = Settings()
