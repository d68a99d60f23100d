"""
Common fixtures: small labelled datasets written to temporary files.
"""
import pytest

from textclassifiers.config import ProgramPaths, TrainingContext
from textclassifiers.console import MLConsole
from textclassifiers.schemas import GitHubIssue, SentimentData
from textclassifiers.training.dataset import load_from_text_file


POSITIVE_REVIEWS = [
    "I love this place.",
    "I love the pasta here.",
    "The spaghetti was wonderful and I love it.",
    "Great food and friendly staff.",
    "I loved the service, really great.",
    "The meal was amazing.",
    "This was a delicious dinner.",
    "Wonderful experience, we love coming back.",
    "The staff was friendly and the food was great.",
    "Best burger I have had in years.",
    "Excellent steak, cooked perfectly.",
    "The desserts were amazing.",
    "Really good value and tasty food.",
    "Everything was fresh and delicious.",
    "We love the cozy atmosphere.",
    "Great prices and a great meal.",
    "This was a fantastic lunch.",
    "The waitress was lovely and attentive.",
    "Awesome pizza, will come back.",
    "Loved every bite.",
    "The soup was perfect.",
    "I love their breakfast menu.",
    "Fantastic flavors and great portions.",
    "So good, I love it.",
]

NEGATIVE_REVIEWS = [
    "The meal was horrible.",
    "Horrible service and cold food.",
    "The spaghetti was bland and overcooked.",
    "I hate this place.",
    "This was a terrible experience.",
    "The food was awful.",
    "Worst steak I have ever had.",
    "The waiter was rude and slow.",
    "Horrible, never coming back.",
    "The meal was disgusting.",
    "Bad food and bad service.",
    "The fries were soggy and bad.",
    "This was a horrible dinner.",
    "Totally disappointed with the pasta.",
    "The place was dirty.",
    "Overpriced and tasteless food.",
    "The burger was horrible.",
    "We waited an hour, terrible.",
    "Not good at all.",
    "The sauce was awful and salty.",
    "I will never eat here again.",
    "The chicken was dry and bad.",
    "Horrible atmosphere and poor staff.",
    "The dessert was stale.",
]

ISSUES = {
    "area-signalr": [
        ("SignalR hub disconnects", "The SignalR hub connection drops after a few seconds over WebSockets"),
        ("WebSockets transport fails", "SignalR falls back to long polling because the WebSockets transport fails"),
        ("Hub method not invoked", "Calling a SignalR hub method from the client never reaches the server"),
        ("Slow WebSockets messages", "Messages sent through SignalR WebSockets arrive with a long delay"),
        ("SignalR reconnect loop", "The client keeps reconnecting to the SignalR hub in a loop"),
        ("Streaming from hub breaks", "Server to client streaming in a SignalR hub stops after the first item"),
        ("WebSockets handshake error", "The WebSockets handshake returns 400 when SignalR negotiates"),
        ("SignalR groups not working", "Adding a connection to a SignalR group does not deliver messages"),
    ],
    "area-entityframework": [
        ("EF migration fails", "Running the EF migration against the database throws an exception"),
        ("DbContext is disposed", "Entity Framework DbContext is disposed before the query runs"),
        ("Database connection timeout", "EF Core times out when opening a connection to the SQL database"),
        ("Entity Framework crashes on save", "SaveChanges in Entity Framework crashes with a null reference"),
        ("Lazy loading returns null", "EF lazy loading of navigation properties returns null from the database"),
        ("Migration drops column", "The generated EF migration drops a database column unexpectedly"),
        ("Slow LINQ query in EF", "A LINQ query translated by Entity Framework scans the whole table"),
        ("DbContext pooling error", "Using DbContext pooling in Entity Framework throws on startup"),
    ],
    "area-mvc": [
        ("Razor view not found", "The MVC controller returns a Razor view that cannot be found"),
        ("Routing ignores area", "MVC attribute routing ignores the area on the controller"),
        ("Model binding fails", "MVC model binding fails for nested properties in the controller action"),
        ("Tag helper renders wrong", "A Razor tag helper renders the wrong attribute in the view"),
        ("Controller action 404", "The MVC controller action returns 404 with conventional routing"),
        ("Partial view caching", "A Razor partial view is cached between requests in MVC"),
        ("Validation attributes skipped", "MVC validation attributes are skipped on the view model"),
        ("Layout page missing", "The Razor layout page is missing for views rendered by the controller"),
    ],
}

ISSUES_TEST = {
    "area-signalr": [("WebSockets hub timeout", "SignalR hub over WebSockets times out")],
    "area-entityframework": [("EF database migration error", "Entity Framework migration fails on the database")],
    "area-mvc": [("Razor view controller bug", "The MVC controller renders the wrong Razor view")],
}


def _write_reviews(path):
    lines = [f"{text}\t1" for text in POSITIVE_REVIEWS] + [f"{text}\t0" for text in NEGATIVE_REVIEWS]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def _write_issues(path, issues, start_id=1):
    lines = ["ID\tArea\tTitle\tDescription"]
    issue_id = start_id
    for area, rows in issues.items():
        for title, description in rows:
            lines.append(f"{issue_id}\t{area}\t{title}\t{description}")
            issue_id += 1
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def context():
    return TrainingContext(seed=0, batch_size=2)


@pytest.fixture
def console():
    return MLConsole(enabled=False)


@pytest.fixture
def data_dir(tmp_path):
    directory = tmp_path / "data"
    directory.mkdir()
    return directory


@pytest.fixture
def program_paths(tmp_path, data_dir):
    return ProgramPaths(data_dir=data_dir, model_dir=tmp_path / "models")


@pytest.fixture
def reviews_file(data_dir):
    return _write_reviews(data_dir / "yelp_labelled.txt")


@pytest.fixture
def issues_train_file(data_dir):
    return _write_issues(data_dir / "issues_train.tsv", ISSUES)


@pytest.fixture
def issues_test_file(data_dir):
    return _write_issues(data_dir / "issues_test.tsv", ISSUES_TEST, start_id=100)


@pytest.fixture
def reviews_view(reviews_file):
    return load_from_text_file(reviews_file, SentimentData, has_header=False)


@pytest.fixture
def issues_view(issues_train_file):
    return load_from_text_file(issues_train_file, GitHubIssue, has_header=True)
