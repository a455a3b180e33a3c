from __future__ import annotations

import base64
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageResource:
    content: bytes
    filename: str
    content_type: str

    @property
    def extension(self) -> str:
        return self.filename.rsplit('.', 1)[-1]

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith('image/')

    @property
    def size(self) -> int:
        return len(self.content)

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.content).decode('ascii')
        return f"data:{self.content_type};base64,{encoded}"
