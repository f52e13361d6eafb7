"""Service catalog and the customer-facing texts built from it."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Service:
    service_id: int
    title: str
    options: dict[str, str]


@dataclass(frozen=True)
class Combo:
    combo_id: str
    title: str
    includes: str


SERVICES: dict[int, Service] = {
    1: Service(
        1,
        "Desarrollo Web",
        {"a": "Landing page", "b": "Sitio corporativo", "c": "Tienda online"},
    ),
    2: Service(
        2,
        "Marketing Digital",
        {
            "a": "Gestión de redes sociales",
            "b": "Publicidad pagada (Google y Meta)",
            "c": "Posicionamiento SEO",
        },
    ),
    3: Service(
        3,
        "Diseño Gráfico",
        {"a": "Logotipo e identidad", "b": "Material impreso", "c": "Piezas para redes"},
    ),
    4: Service(
        4,
        "Producción Audiovisual",
        {"a": "Video promocional", "b": "Fotografía de producto", "c": "Animación 2D"},
    ),
}

# Menu replies are matched as literal strings.
SERVICE_OPTIONS: dict[str, Service] = {str(s.service_id): s for s in SERVICES.values()}

COMBOS: dict[str, Combo] = {
    "1": Combo("1", "Combo Emprende", "Landing page + logotipo + 1 mes de redes"),
    "2": Combo("2", "Combo Crecimiento", "Sitio corporativo + SEO + 3 meses de redes"),
    "3": Combo("3", "Combo Total", "Tienda online + identidad + publicidad + video"),
}

COMBO_OPTION = "5"
ADVISOR_OPTION = "6"
MENU_KEYWORD = "menu"
ADVISOR_TOPIC = "Asesor"


# ── Texts ────────────────────────────────────────────────

GREETING = "👋 ¡Hola! Bienvenido a *ANM*. Soy el asistente virtual."


def main_menu() -> str:
    lines = ["Elige una opción respondiendo con su número:", ""]
    lines += [f"*{s.service_id}.* {s.title}" for s in SERVICES.values()]
    lines.append(f"*{COMBO_OPTION}.* Combos")
    lines.append(f"*{ADVISOR_OPTION}.* Hablar con un asesor")
    return "\n".join(lines)


def greeting_menu() -> str:
    return f"{GREETING}\n\n{main_menu()}"


def service_detail(service: Service) -> str:
    lines = [f"*{service.title}*", "", "Elige la opción que te interesa:"]
    lines += [f"*{letter})* {label}" for letter, label in service.options.items()]
    lines += ["", f"Escribe *{MENU_KEYWORD}* para volver al inicio."]
    return "\n".join(lines)


def combo_listing() -> str:
    lines = ["*Combos*", ""]
    lines += [f"*{c.combo_id}.* {c.title}: {c.includes}" for c in COMBOS.values()]
    lines += ["", f"Escribe *{MENU_KEYWORD}* para volver al inicio."]
    return "\n".join(lines)


HANDOFF_NOTICE = (
    "🙋 En breve un asesor continuará la conversación contigo.\n\n"
    f"Escribe *{MENU_KEYWORD}* si quieres volver al menú principal."
)

INVALID_MENU_OPTION = "❌ Opción no válida. Elige un número del 1 al 6."


def invalid_service_option(service: Service) -> str:
    letters = ", ".join(service.options)
    return f"❌ Opción no válida. Elige una de estas letras: {letters}."


INVALID_COMBO = "❌ Combo no válido. Elige un número del 1 al 3."

INACTIVITY_WARNING = (
    "⏳ ¿Sigues ahí? Si no recibimos respuesta, el chat se reiniciará en 2 minutos."
)

CHAT_RESET_NOTICE = (
    "🔄 El chat se reinició por inactividad. Escribe cualquier mensaje para comenzar de nuevo."
)
