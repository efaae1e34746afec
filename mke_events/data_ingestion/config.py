from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class IngestionConfig:
    """
    Configuration for the event/history ingestion pipeline.
    """

    raw_data_dir: Path = Path("mke_events/data/raw")
    processed_data_dir: Path = Path("mke_events/data/processed")
    raw_events_filename: str = "Event_data.csv"
    raw_history_filename: str = "user_data.csv"
    events_filename: str = "events.csv"
    history_filename: str = "user_history.csv"

    @property
    def raw_events_path(self) -> Path:
        return self.raw_data_dir / self.raw_events_filename

    @property
    def raw_history_path(self) -> Path:
        return self.raw_data_dir / self.raw_history_filename

    @property
    def events_path(self) -> Path:
        return self.processed_data_dir / self.events_filename

    @property
    def history_path(self) -> Path:
        return self.processed_data_dir / self.history_filename


DEFAULT_INGESTION_CONFIG = IngestionConfig()
