#sales_territory/src/territory_assignment/cli/run_popular_coordenadas.py

import argparse
import json

from dotenv import load_dotenv

from territory_assignment.bootstrap import build_services
from territory_assignment.config.settings import Settings
from territory_assignment.logs.logging_config import setup_logging


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Preenche coordenadas ausentes por estimativa de CEP/cidade (sem API externa)."
    )
    parser.parse_args(argv)

    load_dotenv()
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)

    servicos = build_services(settings)
    try:
        stats = servicos.population.popular_coordenadas()
        print(json.dumps(stats, ensure_ascii=False, indent=2))
        return 0
    finally:
        servicos.close()


if __name__ == "__main__":
    raise SystemExit(main())
