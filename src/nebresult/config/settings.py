from dataclasses import dataclass
import os
from dotenv import load_dotenv


load_dotenv()


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    gpa_decimals: int = int(os.getenv("NEBRESULT_GPA_DECIMALS", "2"))
    gp_decimals: int = int(os.getenv("NEBRESULT_GP_DECIMALS", "1"))
    not_graded_label: str = os.getenv("NEBRESULT_NOT_GRADED_LABEL", "NG")
    unassigned_placeholder: str = os.getenv("NEBRESULT_UNASSIGNED_PLACEHOLDER", "-")
    log_level: str = os.getenv("NEBRESULT_LOG_LEVEL", "INFO").upper()

    cors_allowed_origins: tuple[str, ...] = _split_csv(
        os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    )


settings = Settings()
