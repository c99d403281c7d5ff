# main.py
# Punto de entrada: construye una notificación desde la línea de comandos y la envía
from __future__ import annotations
import argparse
import logging
import sys
from typing import Optional, Sequence

from config.settings import Settings
from interface_adapters.controllers.notification_controller import NotificationController, NotificationRequest

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Envía una notificación por email")
    parser.add_argument("--to", action="append", required=True, help="Email o identificador (repetible)")
    parser.add_argument("--cc", action="append", default=[], help="Copia (repetible)")
    parser.add_argument("--subject")
    parser.add_argument("--body", help="Cuerpo en texto plano")
    parser.add_argument("--html", help="Cuerpo HTML")
    parser.add_argument("--related-to", help="Registro relacionado")
    parser.add_argument("--merge-context", help="Registro para combinar la plantilla")
    parser.add_argument("--template", help="Id o nombre de plantilla")
    parser.add_argument("--attach", action="append", default=[], help="Fichero adjunto (repetible)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    request = NotificationRequest(
        to=args.to,
        cc=args.cc,
        subject=args.subject,
        body=args.body,
        html_body=args.html,
        related_to=args.related_to,
        merge_context=args.merge_context,
        template=args.template,
        attachments=args.attach,
    )
    try:
        results = NotificationController(settings).send(request)
    except Exception:
        logger.exception("Error enviando la notificación")
        return 2

    for res in results:
        print(f"{res.recipient}: {'OK' if res.success else 'ERROR ' + (res.error or '')}")
    return 0 if results and all(r.success for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
