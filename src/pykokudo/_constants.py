"""Internal constants shared across the library."""

import re

USER_AGENT = "pykokudo/0.1 (+https://github.com/pykokudo/pykokudo)"

STORAGE_KEY = "kokudo_sticker_data"
STATION_STORAGE_KEY = "michinoeki_data"

EXPORT_FILENAME_PREFIX = "kokudo-sticker-"
STATION_EXPORT_FILENAME_PREFIX = "michinoeki_"

GSI_SEARCH_URL = "https://msearch.gsi.go.jp/address-search/AddressSearch"
NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
WIKI_API_URL = "https://ja.wikipedia.org/w/api.php"
WIKI_PAGE_URL = "https://ja.wikipedia.org/wiki/"
MAPS_LINK_URL = "https://maps.google.com/maps"

# ------------------------------------------------------------------
# Region tables
# ------------------------------------------------------------------

REGIONS: tuple[str, ...] = ("北海道", "東北", "関東", "中部", "北陸", "近畿", "中国", "四国", "九州", "沖縄")

# Prefectures in the conventional north-to-south listing order.
PREFECTURE_ORDER: tuple[str, ...] = (
    "北海道", "青森", "岩手", "宮城", "秋田", "山形", "福島",
    "茨城", "栃木", "群馬", "埼玉", "千葉", "東京", "神奈川",
    "新潟", "富山", "石川", "福井", "山梨", "長野", "岐阜", "静岡", "愛知",
    "三重", "滋賀", "京都", "大阪", "兵庫", "奈良", "和歌山",
    "鳥取", "島根", "岡山", "広島", "山口",
    "徳島", "香川", "愛媛", "高知",
    "福岡", "佐賀", "長崎", "熊本", "大分", "宮崎", "鹿児島", "沖縄",
)  # fmt: skip

# ------------------------------------------------------------------
# Geocoding helpers
# ------------------------------------------------------------------

# Chain-store abbreviations expanded before searching.
CHAIN_NORMALIZE: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^セブン(?!イレブン)"), "セブンイレブン"),
    (re.compile(r"^ファミマ"), "ファミリーマート"),
    (re.compile(r"^ファミ(?!リーマート)"), "ファミリーマート"),
    (re.compile(r"^ロー(?!ソン)"), "ローソン"),
    (re.compile(r"^エネオス?", re.IGNORECASE), "ENEOS"),
    (re.compile(r"^マック$|^マクド$"), "マクドナルド"),
    (re.compile(r"^スタバ"), "スターバックス"),
    (re.compile(r"^ドンキ(?!ホーテ)"), "ドン・キホーテ"),
)

CHAIN_KEYWORDS: frozenset[str] = frozenset(
    {
        "セブンイレブン", "ローソン", "ファミリーマート", "ミニストップ",
        "デイリーヤマザキ", "ポプラ", "スリーエフ", "セイコーマート",
        "エネオス", "ENEOS", "出光", "コスモ石油", "昭和シェル",
        "すき家", "吉野家", "松屋", "マクドナルド", "モスバーガー", "ケンタッキー",
        "スターバックス", "ドトール", "コメダ", "サイゼリヤ", "ガスト", "デニーズ",
        "イオン", "イトーヨーカドー", "ドン・キホーテ",
    }
)  # fmt: skip

MAX_GEOCODE_CANDIDATES = 5
GSI_RESULT_LIMIT = 3
NOMINATIM_RESULT_LIMIT = 3
DUPLICATE_COORD_TOLERANCE = 0.001
COORD_DECIMALS = 6

# ------------------------------------------------------------------
# Map defaults
# ------------------------------------------------------------------

DEFAULT_MAP_CENTER: tuple[float, float] = (36.5, 137.0)
DEFAULT_MAP_ZOOM = 5
SINGLE_PIN_ZOOM = 12
MAX_FIT_ZOOM = 13

MAX_STATION_PHOTOS = 10
