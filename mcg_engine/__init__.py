"""
Motor de cálculo da MCG Consultoria.

- cotação de frete com ICMS por UF de destino, GRIS, ADV e pedágio
- diagnóstico de maturidade comercial (10 categorias, 0 a 3 pontos)
"""

__version__ = "1.0.0"
