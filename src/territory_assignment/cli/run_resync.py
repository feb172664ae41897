#sales_territory/src/territory_assignment/cli/run_resync.py

import argparse
import json

from dotenv import load_dotenv
from loguru import logger

from territory_assignment.bootstrap import build_services
from territory_assignment.config.settings import Settings
from territory_assignment.logs.logging_config import setup_logging


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Re-sincroniza atribuições após edição de territórios."
    )
    parser.add_argument("--representante", type=str, help="ID do representante cujo território foi editado")
    parser.add_argument("--alvos", nargs="+", help="Bairros/CEPs recém-cobertos (com --representante)")
    parser.add_argument("--todos", action="store_true", help="Re-sync de todos os locais sem representante")
    parser.add_argument("--reatribuir", action="store_true", help="Com --todos: reavalia também locais já atribuídos")
    parser.add_argument("--pausa", type=float, help="Segundos entre atribuições (padrão: RESYNC_PAUSE)")

    args = parser.parse_args(argv)

    if bool(args.representante) == bool(args.todos):
        parser.error("Use --representante (com --alvos) ou --todos.")
    if args.representante and not args.alvos:
        parser.error("--representante requer --alvos.")

    load_dotenv()
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)

    servicos = build_services(settings)
    if args.pausa is not None:
        servicos.resync.pausa = args.pausa

    try:
        if args.representante:
            logger.info(f"🧭 Reclamando locais para {args.representante} | alvos={args.alvos}")
            resumo = servicos.resync.reclamar_por_alvos(args.representante, args.alvos)
        else:
            logger.info(f"🔄 Re-sync geral | reatribuir_existentes={args.reatribuir}")
            resumo = servicos.resync.reatribuir(reatribuir_existentes=args.reatribuir)

        print(json.dumps(resumo.to_dict(), ensure_ascii=False, indent=2, default=str))
        logger.success("✅ Re-sync concluído")
        return 0
    finally:
        servicos.close()


if __name__ == "__main__":
    raise SystemExit(main())
