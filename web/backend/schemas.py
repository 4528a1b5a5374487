from typing import Optional

from pydantic import BaseModel, Field

# Field names match the camelCase JSON written to the catalog cache


class QualityInfo(BaseModel):
    encoding: str
    label: str
    tier: str
    bitDepth: str
    sampleRate: str
    bitrate: Optional[str] = None


class ContainerInfo(BaseModel):
    id: str
    parentID: Optional[str] = None
    title: str
    upnpClass: Optional[str] = Field(default=None, alias="class")
    childCount: Optional[int] = None

    model_config = {"populate_by_name": True}


class ItemInfo(BaseModel):
    id: str
    title: str
    artist: str
    album: str
    duration: Optional[str] = None
    url: Optional[str] = None
    genre: Optional[str] = None
    bitrate: Optional[int] = None
    nrAudioChannels: Optional[int] = None
    albumArtUrl: Optional[str] = None
    quality: Optional[QualityInfo] = None
    date: Optional[str] = None
    composer: Optional[str] = None
    lyrics: Optional[str] = None


class SnapshotMetadata(BaseModel):
    lastUpdated: Optional[str] = None
    totalContainers: int
    totalItems: int


class CatalogSnapshotResponse(BaseModel):
    containers: list[ContainerInfo]
    items: list[ItemInfo]
    metadata: SnapshotMetadata
