"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = [
    "health", "movies", "upload", "stream", "delete",
    "prints", "upload-print", "download-print", "delete-print",
    "server", "clear", "exit", "help",
]

MOVIE_FIELDS = ("id", "title", "description", "genre", "year", "rating", "director", "duration")

STYLE = Style.from_dict(
    {
        "prompt": "#E5A50A bold",
        "server": "#0088ff",
    }
)

AMBER = "\033[38;2;229;165;10m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{AMBER}
  _                          _          _  __
 | |__   ___  _ __ ___   ___| |__   ___| |/ _|
 | '_ \\ / _ \\| '_ ` _ \\ / _ \\ '_ \\ / _ \\ | |_
 | | | | (_) | | | | | |  __/ | | |  __/ |  _|
 |_| |_|\\___/|_| |_| |_|\\___|_| |_|\\___|_|_|
{RESET}"""

WELCOME_TITLE = "homeshelf CLI - movies and print files on your LAN"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "homeshelf "

HELP_TEXT = """Available commands:
  health                                  Check that the server is up
  movies                                  List movies, newest first
  upload <path> [field=value ...]         Upload a movie (fields: id, title, description,
                                          genre, year, rating, director, duration)
  stream <id> <output> [start-end]        Save a movie, or a byte range of it, to a local file
  delete <id>                             Delete a movie
  prints                                  List print files, newest first
  upload-print <path> [id=value]          Upload a print file
  download-print <id> [output]            Download a print file (defaults to its original name)
  delete-print <id>                       Delete a print file
  server <host> <port>                    Point the CLI at another server
  clear                                   Clear screen and redisplay welcome message
  help                                    Show this help
  exit                                    Exit REPL

Examples:
  upload ~/clips/clip.mp4 title="Test" genre="Action,Comedy" year=2024
  stream 3f2a... part.mp4 0-999
  upload-print benchy.stl
  download-print 7c1e... ~/Downloads/benchy.stl"""

UPLOAD_EXTENSIONS = {
    "upload": (".mp4", ".mkv", ".m4v", ".mov", ".webm", ".avi"),
    "upload-print": (".stl", ".gcode", ".zip", ".3mf", ".obj"),
}
