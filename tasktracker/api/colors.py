from enum import Enum

class TaskColor(Enum):
    RED = "[red]"
    ORANGE = "[dark_orange]"
    GREEN = "[green]"
    DIM = "[dim]"
    RESET = "[/]"

    def __str__(self):
        return self.value
