from .simulation import Simulation, Variable, MVVariable, Genotypes, Normal
from .decorators import variable
from .model import CausalModel, SampleDesign, simulate_population
