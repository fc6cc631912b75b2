from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class AlbumRecord:
    title: str
    artist: str = ""             # primary contributor, may be empty
    external_id: str = ""        # Jellyfin item Id or RYM album id
    year: int = 0                # 0 when unknown
    overview: str = ""
    image_tag: str = ""          # Jellyfin PrimaryImageTag

    def label(self) -> str:
        text = f"{self.artist} - {self.title}".strip(" -")
        return f"{text} ({self.year})" if self.year else text

    def to_dict(self) -> dict:
        return asdict(self)
