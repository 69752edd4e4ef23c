from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./fm200.db"
    COMPANY_NAME: str = "Fire Safety Tools"
    COMPANY_EMAIL: str = "support@firesafetytools.com"

    # Price table + exchange rates: falls back to built-in defaults if the file is absent
    PRICE_TABLE_PATH: str = "data/prices.json"
    BASE_CURRENCY: str = "USD"
    DEFAULT_CURRENCY: str = "USD"

    class Config:
        env_file = ".env"


settings = Settings()
