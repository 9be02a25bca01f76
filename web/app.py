"""FastAPI web adapter for the CHIP-8 virtual machine."""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Optional
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chip8 import run_rom, RunOptions
from chip8.disasm import disassemble
from chip8.memory import MEMORY_SIZE, PROGRAM_START


# Constants
MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START


# Request/Response models
class RunOptionsModel(BaseModel):
    max_steps: int = Field(default=1000, ge=1, le=1000000)
    seed: Optional[int] = None
    trace: bool = True
    trace_limit: int = Field(default=1000, ge=0, le=100000)
    keys: dict[str, Optional[int]] = Field(default_factory=dict)
    stop_on_wait: bool = False


class RunRequest(BaseModel):
    rom: str = Field(description="ROM bytes as a hex string")
    options: Optional[RunOptionsModel] = None


class DisassembleRequest(BaseModel):
    rom: str = Field(description="ROM bytes as a hex string")


class ListingRow(BaseModel):
    addr: int
    word: int
    text: str


class RunResponse(BaseModel):
    status: str
    stop_reason: str
    steps_executed: int
    draws: int
    final_state: dict
    screen: str
    trace: list[dict]
    error: Optional[dict] = None


def decode_rom(text: str) -> bytes:
    """Parse a hex string (whitespace allowed) into ROM bytes."""
    try:
        rom = bytes.fromhex("".join(text.split()))
    except ValueError:
        raise HTTPException(status_code=400, detail="ROM must be a hex string")
    if len(rom) > MAX_ROM_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"ROM size exceeds limit of {MAX_ROM_SIZE} bytes",
        )
    return rom


# Create FastAPI app
app = FastAPI(
    title="CHIP-8 Virtual Machine",
    description="Web API for running CHIP-8 ROMs headlessly with tracing",
    version="0.1.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/api/run", response_model=RunResponse)
async def run_code(request: RunRequest):
    """Run a CHIP-8 ROM for a bounded number of steps.

    Args:
        request: ROM bytes and execution options

    Returns:
        Execution result with final state, screen, and trace
    """
    rom = decode_rom(request.rom)
    opts = request.options or RunOptionsModel()

    # Convert key schedule keys from string to int
    keys = {}
    for k, v in opts.keys.items():
        try:
            keys[int(k)] = v
        except ValueError:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid step number key: {k}",
            )

    run_opts = RunOptions(
        max_steps=opts.max_steps,
        seed=opts.seed,
        trace=opts.trace,
        trace_limit=opts.trace_limit,
        keys=keys,
        stop_on_wait=opts.stop_on_wait,
    )

    result = run_rom(rom, options=run_opts)

    return result.to_dict()


@app.post("/api/disassemble", response_model=list[ListingRow])
async def disassemble_rom(request: DisassembleRequest):
    """List each instruction word of a ROM with its mnemonic."""
    rom = decode_rom(request.rom)
    return [
        ListingRow(addr=addr, word=word, text=text)
        for addr, word, text in disassemble(rom)
    ]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
