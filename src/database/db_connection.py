#sales_territory/src/database/db_connection.py

import time
from contextlib import contextmanager
from functools import wraps
from typing import Any, Dict, Optional

from loguru import logger
from psycopg2 import DatabaseError, InterfaceError, OperationalError
from psycopg2.pool import ThreadedConnectionPool


# =====================================================
# 🧱 Pool explícito (criado uma vez pelo host e injetado)
# =====================================================
class ConnectionProvider:
    """
    Dono do ThreadedConnectionPool. A aplicação cria uma instância no
    startup, repassa para reader/writer e chama close() no shutdown.
    """

    def __init__(self, params: Dict[str, Any], minconn: int = 1, maxconn: int = 10):
        self.params = params
        self.pool = ThreadedConnectionPool(minconn=minconn, maxconn=maxconn, **params)
        logger.info(
            f"🔌 ThreadedConnectionPool inicializado | host={params.get('host')} "
            f"db={params.get('dbname')} max={maxconn}"
        )

    @contextmanager
    def connection(self):
        """
        Conexão do pool com commit no sucesso, rollback em erro e devolução garantida.
            with provider.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1;")
        """
        conn = self.pool.getconn()
        try:
            yield conn
            conn.commit()
        except (OperationalError, InterfaceError) as e:
            conn.rollback()
            logger.error(f"💥 Erro operacional na conexão: {e}")
            raise
        except DatabaseError as e:
            conn.rollback()
            logger.error(f"❌ Erro de banco de dados: {e}")
            raise
        except Exception as e:
            conn.rollback()
            logger.error(f"⚠️ Exceção não tratada: {e}")
            raise
        finally:
            self.pool.putconn(conn)

    def close(self):
        if self.pool and not self.pool.closed:
            self.pool.closeall()
            logger.info("🔌 Pool PostgreSQL encerrado.")


# =====================================================
# 🔁 Retry para operações de leitura/escrita
# =====================================================
def retry_on_failure(max_retries: int = 3, delay: float = 0.5, backoff: float = 2.0, default: Optional[Any] = None):
    """
    Retenta erros de conexão com backoff. Esgotadas as tentativas,
    ou em erro de banco não transitório, registra e devolve `default`.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            tentativa = 0
            while tentativa < max_retries:
                try:
                    return func(*args, **kwargs)
                except (OperationalError, InterfaceError) as e:
                    tentativa += 1
                    logger.warning(
                        f"⚠️ Erro de conexão ({func.__name__}) tentativa {tentativa}/{max_retries}: {e}"
                    )
                    time.sleep(delay * (backoff ** (tentativa - 1)))
                except DatabaseError as e:
                    logger.error(f"❌ Erro de banco em {func.__name__}: {e}")
                    return default
            logger.error(f"🚨 Falha após {max_retries} tentativas em {func.__name__}")
            return default
        return wrapper
    return decorator


# =====================================================
# 🔍 Verificação rápida (saúde do banco)
# =====================================================
def verificar_conexao(provider: ConnectionProvider) -> bool:
    """
    Testa a conexão com o banco de dados e retorna True/False.
    Útil para inicialização de containers e healthchecks.
    """
    try:
        with provider.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT NOW();")
                result = cur.fetchone()
                logger.success(f"✅ Banco conectado. Hora atual: {result[0]}")
        return True
    except (DatabaseError, InterfaceError) as e:
        logger.error(f"❌ Falha ao testar conexão com o banco: {e}")
        return False
