from __future__ import annotations

from typing import List

from fastapi import FastAPI, HTTPException

from . import __version__
from .engine import MotorMCG
from .errors import MCGEngineError
from .logging_config import get_logger
from .schemas import (
    CotacaoFreteRequest,
    CotacaoFreteResponse,
    DiagnosticoRequest,
    DiagnosticoResponse,
    IcmsUF,
    LeadRequest,
    LeadResponse,
    Pergunta,
    PropostaFreteRequest,
    PropostaFreteResponse,
)

APP_NAME = "mcg-engine"
app = FastAPI(title=APP_NAME, version=__version__)
logger = get_logger(__name__)

motor = MotorMCG()


def erro_validacao(e: MCGEngineError) -> HTTPException:
    logger.warning(
        "Entrada rejeitada",
        extra={"extra_data": {"erro": type(e).__name__, "detalhe": str(e)}},
    )
    return HTTPException(status_code=422, detail={"erro": type(e).__name__, "detalhe": str(e)})


@app.get("/health")
def health():
    return {
        "status": "ok",
        "data_dir": motor.settings.data_dir,
        "ufs": len(motor.icms_table),
    }


@app.get("/icms", response_model=List[IcmsUF])
def listar_icms():
    return motor.listar_icms()


@app.post("/frete/cotacao", response_model=CotacaoFreteResponse)
def cotar_frete(req: CotacaoFreteRequest):
    try:
        return motor.cotar_frete(req)
    except MCGEngineError as e:
        raise erro_validacao(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/frete/proposta", response_model=PropostaFreteResponse)
def cotar_proposta(req: PropostaFreteRequest):
    try:
        return motor.cotar_proposta(req)
    except MCGEngineError as e:
        raise erro_validacao(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/diagnostico/perguntas", response_model=List[Pergunta])
def perguntas():
    return motor.perguntas()


@app.post("/diagnostico", response_model=DiagnosticoResponse)
def diagnosticar(req: DiagnosticoRequest):
    try:
        return motor.diagnosticar(req)
    except MCGEngineError as e:
        raise erro_validacao(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/diagnostico/lead", response_model=LeadResponse)
def montar_lead(req: LeadRequest):
    try:
        return motor.montar_lead(req)
    except MCGEngineError as e:
        raise erro_validacao(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/reload")
def reload_sources():
    # Recarrega o CSV de ICMS sem reiniciar o container
    try:
        motor.reload_sources()
        return {"ok": True, "ufs": len(motor.icms_table)}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
