from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..core.enums import FieldKind, RequestStatus


@dataclass(frozen=True)
class FieldConfig:
    """Mô tả một trường trên form tạo/sửa đơn."""

    key: str
    label: str
    kind: FieldKind
    required: bool = False
    options: tuple[str, ...] = ()
    hidden: bool = False
    min_value: Optional[Union[int, str]] = None

    def to_dict(self) -> dict:
        out = {
            "key": self.key,
            "label": self.label,
            "type": self.kind.value,
            "required": self.required,
            "hidden": self.hidden,
        }
        if self.options:
            out["options"] = list(self.options)
        if self.min_value is not None:
            out["min"] = self.min_value
        return out


DEFAULT_CLASSES = ("10A1", "10A2", "11A1", "11A2", "12A1")
DEFAULT_REASONS = ("Ốm đau", "Việc gia đình", "Đi khám bệnh", "Khác")

LEAVE_REQUEST_FIELDS: tuple[FieldConfig, ...] = (
    FieldConfig("id", "ID", FieldKind.TEXT, hidden=True),
    FieldConfig("week", "Tuần học", FieldKind.NUMBER, required=True),
    FieldConfig("studentName", "Họ và tên học sinh", FieldKind.TEXT, required=True),
    FieldConfig("class", "Lớp", FieldKind.SELECT, required=True, options=DEFAULT_CLASSES),
    FieldConfig("reason", "Lý do nghỉ", FieldKind.SELECT, required=True, options=DEFAULT_REASONS),
    FieldConfig("detail", "Chi tiết", FieldKind.TEXTAREA),
    FieldConfig("fromDate", "Từ ngày", FieldKind.DATE, required=True),
    FieldConfig("toDate", "Đến ngày", FieldKind.DATE, required=True),
    FieldConfig("attachmentUrl", "Minh chứng (Ảnh/File)", FieldKind.FILE),
    FieldConfig("status", "Trạng thái", FieldKind.SELECT, options=tuple(s.value for s in RequestStatus)),
)
