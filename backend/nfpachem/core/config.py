from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings

DATA_DIR = Path(__file__).resolve().parent.parent / "modules" / "chemicals" / "data"


class Settings(BaseSettings):
    # App
    app_name: str = "NFPA Chemical ID"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # Chemical databases (loaded in order; query results keep this order)
    database_files: list[str] = [
        str(DATA_DIR / "nfpa_lab_reagents.json"),
        str(DATA_DIR / "nfpa_industrial.json"),
    ]

    # Identifier resolvers, highest priority first (ties go to the earlier one)
    resolvers: list[str] = ["cts", "opsin", "pubchem"]
    resolver_timeout_seconds: float = 5.0
    http_user_agent: str = "nfpachem/0.1"

    # External name-resolution services
    cts_base_url: str = "https://cts.fiehnlab.ucdavis.edu"
    opsin_base_url: str = "https://opsin.ch.cam.ac.uk"
    pubchem_base_url: str = "https://pubchem.ncbi.nlm.nih.gov/rest/pug"

    # Deduplication
    dedupe_max_workers: int = 4
    dedupe_drop_unnamed: bool = False
    default_id_type: str = "CID"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
