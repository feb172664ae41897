#sales_territory/src/territory_assignment/cli/run_assign.py

import argparse
import json

from dotenv import load_dotenv
from loguru import logger

from territory_assignment.bootstrap import build_services
from territory_assignment.config.settings import Settings
from territory_assignment.domain.address_normalizer import address_from_raw
from territory_assignment.logs.logging_config import setup_logging


def main(argv=None):
    parser = argparse.ArgumentParser(description="Atribui um local ao representante cujo território o cobre.")
    parser.add_argument("--local_id", type=str, help="ID do local no banco")
    parser.add_argument("--sem_persistir", action="store_true", help="Apenas calcula, não grava a atribuição")
    parser.add_argument("--cep", type=str, help="Pré-visualização: CEP (sem local_id)")
    parser.add_argument("--cidade", type=str, help="Pré-visualização: cidade")
    parser.add_argument("--bairro", type=str, help="Pré-visualização: bairro")
    parser.add_argument("--logradouro", type=str, help="Pré-visualização: logradouro")
    parser.add_argument("--uf", type=str, help="Pré-visualização: UF")

    args = parser.parse_args(argv)

    if not args.local_id and not (args.cep or args.cidade):
        parser.error("Informe --local_id ou um endereço (--cep / --cidade).")

    load_dotenv()
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)

    servicos = build_services(settings)
    try:
        if args.local_id:
            logger.info(f"🧭 Atribuindo local {args.local_id} | persistir={not args.sem_persistir}")
            resultado = servicos.assignment.atribuir_local(args.local_id, persistir=not args.sem_persistir)
            if resultado is None:
                logger.error(f"❌ Local {args.local_id} não encontrado.")
                return 1
        else:
            endereco = address_from_raw({
                "logradouro": args.logradouro,
                "bairro": args.bairro,
                "cidade": args.cidade,
                "uf": args.uf,
                "cep": args.cep,
            })
            resultado = servicos.assignment.preview(address=endereco)

        print(json.dumps(resultado.to_dict(), ensure_ascii=False, indent=2))
        return 0 if resultado.success else 2
    finally:
        servicos.close()


if __name__ == "__main__":
    raise SystemExit(main())
