from __future__ import annotations

APP_NAME = "PureHR"
APP_VERSION = "1.0.0"

# Paramètres de regroupement exposés à l'UI
DEFAULT_GROUP_SIZE = 5
DEFAULT_ROOM_STYLE = "cluster"
DEFAULT_REGION = "北區"

# CSV
CSV_HEADER = ["組別", "姓名", "部門"]
CSV_FILENAME_PREFIX = "分組結果"

BUSINESS_UNITS = [
    "東森購物",
    "生技(栢馥)",
    "東森國際",
    "東森資產",
    "大陸自然美",
    "台灣自然美",
    "新媒體",
    "民調雲",
    "東森保代",
    "寵物雲",
    "慈愛",
    "草莓網",
    "東森房屋",
    "分眾傳媒",
    "全球(直消)",
]
