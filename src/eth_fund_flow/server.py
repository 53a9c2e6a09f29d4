"""
FastAPI application exposing beneficiary and payer analysis.

Run with: eth-fund-flow serve --address <addr> --mode both --port 8080
"""

import html
import logging
from typing import List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from .analyzer import FundFlowAnalyzer
from .models import CounterpartyAggregate, Role

logger = logging.getLogger(__name__)

SAMPLE_ADDRESSES = [
    ("0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2", "WETH Contract"),
    ("0x7a250d5630b4cf539739df2c5dacb4c659f2488d", "Uniswap V2 Router"),
    ("0xb8901acb165ed027e32754e0ffe830802919727f", "Sample address"),
]


# -----------------------------------------------------------------------------
# Response models
# -----------------------------------------------------------------------------

class TransactionDetails(BaseModel):
    tx_amount: float = Field(..., description="Amount in Ether")
    date_time: str = Field(..., description="Formatted block timestamp")
    transaction_id: str = Field(..., description="Transaction hash")


class BeneficiaryData(BaseModel):
    beneficiary_address: str
    amount: float
    transactions: List[TransactionDetails]


class PayerData(BaseModel):
    payer_address: str
    amount: float
    transactions: List[TransactionDetails]


class BeneficiaryResponse(BaseModel):
    message: str = "success"
    data: List[BeneficiaryData]


class PayerResponse(BaseModel):
    message: str = "success"
    data: List[PayerData]


class ErrorResponse(BaseModel):
    message: str = "error"
    error: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code,
                        content=ErrorResponse(error=message).model_dump())


def _run_analysis(analyzer: FundFlowAnalyzer, address: Optional[str], role: Role):
    """Return (aggregates, None) on success or (None, error response)."""
    if not address:
        return None, _error(400, "address parameter is required")

    logger.info(f"Analyzing {role.value}s for address: {address}")
    try:
        return analyzer.analyze(address, role), None
    except Exception as e:
        logger.error(f"Error analyzing {role.value}: {e}")
        return None, _error(500, str(e))


def _to_data(aggregates: List[CounterpartyAggregate]) -> list:
    return [agg.to_dict() for agg in aggregates]


# -----------------------------------------------------------------------------
# HTML pages
# -----------------------------------------------------------------------------

_STYLE = """
        body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 800px; margin: 0 auto; padding: 20px; }
        h1 { color: #2c3e50; border-bottom: 2px solid #3498db; padding-bottom: 10px; }
        h2 { color: #2980b9; }
        pre { background-color: #f8f8f8; border: 1px solid #ddd; padding: 10px; border-radius: 4px; overflow-x: auto; }
        .endpoint { background-color: #e9f7fe; border-left: 3px solid #3498db; padding: 15px; margin: 15px 0; }
        .example { font-family: monospace; background-color: #f5f5f5; padding: 10px; border-radius: 4px; margin: 10px 0; }
        a { color: #3498db; text-decoration: none; }
        a:hover { text-decoration: underline; }
        .button { display: inline-block; padding: 10px 15px; background-color: #3498db; color: white; border-radius: 4px; margin: 10px 5px; }
        .info { background-color: #f8f9fa; border-left: 5px solid #3498db; padding: 15px; margin: 15px 0; }
"""


def render_home_page(default_address: str, analysis_mode: str) -> str:
    """Landing page listing the endpoints with example links."""
    example = html.escape(default_address or "0xYourEthereumAddressHere")
    address_info = (f"<p>Current address: <code>{html.escape(default_address)}</code></p>"
                    if default_address else "")
    samples = "\n".join(
        f"        <li><code>{addr}</code> ({label})</li>" for addr, label in SAMPLE_ADDRESSES)

    return f"""<!DOCTYPE html>
<html>
<head>
    <title>Ethereum Fund Flow Analysis API</title>
    <style>{_STYLE}    </style>
</head>
<body>
    <h1>Ethereum Fund Flow Analysis API</h1>
    <p>This API analyzes the flow of funds for Ethereum addresses to determine beneficiary addresses and payers.</p>

    <div class="info">
        <p>Current analysis mode: <strong>{html.escape(analysis_mode)}</strong></p>
        {address_info}
    </div>

    <h2>Endpoints</h2>

    <div class="endpoint">
        <h3>Health Check</h3>
        <p>Check if the API is running:</p>
        <div class="example"><a href="/health" target="_blank">/health</a></div>
    </div>

    <div class="endpoint">
        <h3>Beneficiary Analysis</h3>
        <p>Identifies where funds are flowing to from a given address:</p>
        <div class="example">/beneficiary?address=&lt;ethereum_address&gt;</div>
        <p>Example:</p>
        <div class="example"><a href="/beneficiary?address={example}" target="_blank">/beneficiary?address={example}</a></div>
    </div>

    <div class="endpoint">
        <h3>Payer Analysis</h3>
        <p>Identifies where funds are coming from to a given address:</p>
        <div class="example">/payer?address=&lt;ethereum_address&gt;</div>
        <p>Example:</p>
        <div class="example"><a href="/payer?address={example}" target="_blank">/payer?address={example}</a></div>
    </div>

    <h2>Sample Ethereum Addresses for Testing</h2>
    <ul>
{samples}
    </ul>

    <h2>Command Line Usage</h2>
    <pre>
  eth-fund-flow serve --address 0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2 --mode beneficiary
  eth-fund-flow serve --address 0x7a250d5630b4cf539739df2c5dacb4c659f2488d --mode payer
  eth-fund-flow --help</pre>
</body>
</html>
"""


def render_analyze_page(default_address: str, analysis_mode: str) -> str:
    """Page with one button per analysis enabled by the mode."""
    address = html.escape(default_address)
    buttons = []
    if analysis_mode in ("beneficiary", "both"):
        buttons.append(f'<a href="/beneficiary?address={address}" class="button">Analyze Beneficiaries</a>')
    if analysis_mode in ("payer", "both"):
        buttons.append(f'<a href="/payer?address={address}" class="button">Analyze Payers</a>')
    button_html = "\n    ".join(buttons)

    return f"""<!DOCTYPE html>
<html>
<head>
    <title>Analyze Ethereum Address</title>
    <style>{_STYLE}    </style>
</head>
<body>
    <h1>Analyze Ethereum Address</h1>

    <div class="info">
        <p>Ethereum address: <code>{address}</code></p>
        <p>Analysis mode: <code>{html.escape(analysis_mode)}</code></p>
    </div>

    <p>Click below to analyze this address:</p>

    {button_html}

    <p><a href="/">Back to Home</a></p>
</body>
</html>
"""


# -----------------------------------------------------------------------------
# Application
# -----------------------------------------------------------------------------

def create_app(analyzer: FundFlowAnalyzer, default_address: str = "",
               analysis_mode: str = "both") -> FastAPI:
    """Build the ASGI app around an analyzer instance."""
    app = FastAPI(title="Ethereum Fund Flow Analysis API")
    app.state.analyzer = analyzer

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"Request: {request.method} {request.url.path}")
        return await call_next(request)

    @app.get("/beneficiary", response_model=BeneficiaryResponse,
             responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
    def beneficiary(address: Optional[str] = Query(None, description="Ethereum address")):
        results, error = _run_analysis(analyzer, address, Role.BENEFICIARY)
        if error is not None:
            return error
        return {"message": "success", "data": _to_data(results)}

    @app.get("/payer", response_model=PayerResponse,
             responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
    def payer(address: Optional[str] = Query(None, description="Ethereum address")):
        results, error = _run_analysis(analyzer, address, Role.PAYER)
        if error is not None:
            return error
        return {"message": "success", "data": _to_data(results)}

    @app.get("/health", response_class=PlainTextResponse)
    def health():
        return "OK"

    @app.get("/", response_class=HTMLResponse)
    def home():
        return render_home_page(default_address, analysis_mode)

    if default_address:
        @app.get("/analyze-default", response_class=HTMLResponse)
        def analyze_default():
            return render_analyze_page(default_address, analysis_mode)

    return app
