"""freight-report — Turn messy trip spreadsheets into per-driver reports."""

__version__ = "0.1.0"

DEFAULT_HEADER_KEYWORDS: list[str] = [
    "conductor",
    "fecha",
    "precio",
    "importe",
    "cliente",
    "origen",
    "destino",
]

DRIVER_ALIASES: list[str] = ["Conductor", "Chofer", "Driver"]
DATE_ALIASES: list[str] = ["F.Carga", "Fecha Carga", "Fecha", "Date"]
AMOUNT_ALIASES: list[str] = ["Precio", "Importe", "Total", "Price", "Amount"]
