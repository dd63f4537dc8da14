from typing import Dict, List, Optional, Union

from pydantic import BaseModel

CellValue = Union[int, float, str]


class Meta(BaseModel):
    source: str
    parsed_at: str


class Warning(BaseModel):
    code: str
    message: str
    context: Dict[str, object]


class NormalizedReport(BaseModel):
    meta: Meta
    rows: List[Dict[str, CellValue]] = []
    detectedWeekNumber: Optional[int] = None
    detectedStoreNumber: Optional[str] = None
    warnings: List[Warning] = []
