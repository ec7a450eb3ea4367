from loguru import logger

from .stub_emitter import StubEmitter
from .stub_generator import StubGenerator


class StubDriver:
    """
    Generates and renders the test doubles of a merged symbol table.

    Args:
        symbols: the merged SymbolTable
        classification: Classification giving the emission order
        interfaces: interface names to stub, all interfaces when None
        output_file: header path to write, nothing is written when empty
        properties: the "stub" properties section
    """

    def __init__(
        self,
        symbols,
        classification=None,
        interfaces=None,
        output_file=None,
        properties=None,
    ):
        self.symbols = symbols
        self.properties = properties if properties is not None else {}
        self.diagnostics = symbols.diagnostics

        self.generator = StubGenerator(
            symbols,
            classification,
            self.diagnostics,
            prefix=self.properties.get("prefix", "Stub"),
        )
        self.stubs = self.generator.generate_all(
            interfaces, workers=self.properties.get("workers", 1)
        )
        self.emitter = StubEmitter(symbols, self.diagnostics, self.properties)
        self.source = self.emitter.render(self.stubs)
        logger.info("Generated {} test double(s)", len(self.stubs))

        self.output_file = output_file
        if output_file:
            with open(output_file, "w", encoding="utf-8") as f:
                f.write(self.source)
            logger.debug("Wrote stub header to {}", output_file)

    def get_stubs(self):
        return self.stubs

    def get_source(self):
        return self.source
