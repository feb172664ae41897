# territory_assignment/api/dependencies.py

import jwt
from fastapi import HTTPException, Request, status


# =====================================================
# 🔐 Dependency de autenticação
# =====================================================
async def verify_token(request: Request):
    """
    Valida JWT localmente (emitido pelo serviço de autenticação).
    Injeta usuário autenticado em request.state.user
    """
    settings = request.app.state.settings
    if not settings.jwt_secret_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="JWT_SECRET_KEY não definido no ambiente."
        )

    auth_header = request.headers.get("Authorization")

    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token ausente ou inválido."
        )

    token = auth_header.replace("Bearer ", "").strip()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expirado."
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido."
        )

    for field in ("user_id", "role", "email"):
        if field not in payload:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Token inválido: campo '{field}' ausente."
            )

    request.state.user = {
        "user_id": payload["user_id"],
        "role": payload["role"],
        "email": payload["email"],
    }


def require_admin(request: Request):
    user = getattr(request.state, "user", None) or {}
    if user.get("role") not in ("admin", "root"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Usuário sem permissão.")


def get_servicos(request: Request):
    return request.app.state.servicos
