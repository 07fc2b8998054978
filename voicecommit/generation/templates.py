"""Offline project templates used when the generative backend is unavailable.

Selection is a pure function of the transcript: the first intent whose
keyword appears in the lowercased transcript wins, otherwise the basic web
app is returned.
"""

from dataclasses import dataclass

from voicecommit.types.changes import CodeGenerationResult, FileChange


@dataclass(frozen=True)
class Template:
    name: str
    language: str
    files: tuple[tuple[str, str], ...]  # (path, content)

    def to_result(self) -> CodeGenerationResult:
        changes = tuple(FileChange(path=path, content=content) for path, content in self.files)
        return CodeGenerationResult(
            files=changes,
            commit_message=f"Create {self.name} via voice command",
            summary=f"Generated {self.name} ({self.language}) with {len(changes)} files",
        )


def _page(title: str, body: str, script: str, stylesheet: bool = False) -> str:
    link = '\n    <link rel="stylesheet" href="style.css">' if stylesheet else ""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>{link}
</head>
<body>
{body}
    <script src="{script}"></script>
</body>
</html>
"""


def _readme(title: str, description: str, features: list[str]) -> str:
    bullets = "\n".join(f"- {feature}" for feature in features)
    return f"""# {title}

{description}

## Features

{bullets}

## Usage

Open `index.html` in your web browser.
"""


CALCULATOR = Template(
    name="Basic Calculator",
    language="JavaScript",
    files=(
        (
            "index.html",
            _page(
                "Basic Calculator",
                """    <div class="calculator">
        <input type="text" id="result" readonly>
        <div class="buttons">
            <button onclick="clearDisplay()">C</button>
            <button onclick="deleteLast()">&larr;</button>
            <button onclick="appendToDisplay('/')">/</button>
            <button onclick="appendToDisplay('*')">&times;</button>
            <button onclick="appendToDisplay('7')">7</button>
            <button onclick="appendToDisplay('8')">8</button>
            <button onclick="appendToDisplay('9')">9</button>
            <button onclick="appendToDisplay('-')">-</button>
            <button onclick="appendToDisplay('4')">4</button>
            <button onclick="appendToDisplay('5')">5</button>
            <button onclick="appendToDisplay('6')">6</button>
            <button onclick="appendToDisplay('+')">+</button>
            <button onclick="appendToDisplay('1')">1</button>
            <button onclick="appendToDisplay('2')">2</button>
            <button onclick="appendToDisplay('3')">3</button>
            <button onclick="calculate()" class="equals">=</button>
            <button onclick="appendToDisplay('0')" class="zero">0</button>
            <button onclick="appendToDisplay('.')">.</button>
        </div>
    </div>""",
                "script.js",
                stylesheet=True,
            ),
        ),
        (
            "style.css",
            """* { margin: 0; padding: 0; box-sizing: border-box; }
body { font-family: Arial, sans-serif; background: linear-gradient(135deg, #667eea, #764ba2); display: flex; justify-content: center; align-items: center; min-height: 100vh; }
.calculator { background: white; border-radius: 20px; padding: 20px; box-shadow: 0 10px 30px rgba(0, 0, 0, 0.3); max-width: 300px; }
#result { width: 100%; height: 60px; font-size: 24px; text-align: right; padding: 0 15px; margin-bottom: 20px; border: 2px solid #ddd; border-radius: 10px; }
.buttons { display: grid; grid-template-columns: repeat(4, 1fr); gap: 10px; }
button { height: 60px; font-size: 18px; border: none; border-radius: 10px; cursor: pointer; background: #f0f0f0; }
.equals { background: #4caf50; color: white; }
.zero { grid-column: span 2; }
""",
        ),
        (
            "script.js",
            """const display = document.getElementById('result');

function appendToDisplay(value) {
    display.value += value;
}

function clearDisplay() {
    display.value = '';
}

function deleteLast() {
    display.value = display.value.slice(0, -1);
}

function calculate() {
    if (!/^[0-9+\\-*/. ]+$/.test(display.value)) {
        display.value = 'Error';
        return;
    }
    try {
        display.value = Function(`"use strict"; return (${display.value});`)();
    } catch (error) {
        display.value = 'Error';
    }
}
""",
        ),
        (
            "README.md",
            _readme(
                "Basic Calculator",
                "A simple calculator built with HTML, CSS, and JavaScript.",
                ["Basic arithmetic operations", "Clear and delete controls", "Responsive layout"],
            ),
        ),
    ),
)

TODO_LIST = Template(
    name="Todo List App",
    language="JavaScript",
    files=(
        (
            "index.html",
            _page(
                "Todo List",
                """    <div class="container">
        <h1>Todo List</h1>
        <input type="text" id="todoInput" placeholder="Add a new task...">
        <button id="addBtn">Add</button>
        <ul id="todoList"></ul>
    </div>""",
                "app.js",
            ),
        ),
        (
            "app.js",
            """let todos = JSON.parse(localStorage.getItem('todos') || '[]');

function save() {
    localStorage.setItem('todos', JSON.stringify(todos));
}

function render() {
    const list = document.getElementById('todoList');
    list.innerHTML = '';
    todos.forEach((todo, index) => {
        const item = document.createElement('li');
        const checkbox = document.createElement('input');
        checkbox.type = 'checkbox';
        checkbox.checked = todo.completed;
        checkbox.addEventListener('change', () => toggleTodo(index));
        const label = document.createElement('span');
        label.textContent = todo.text;
        if (todo.completed) label.style.textDecoration = 'line-through';
        const remove = document.createElement('button');
        remove.textContent = 'Delete';
        remove.addEventListener('click', () => deleteTodo(index));
        item.append(checkbox, label, remove);
        list.appendChild(item);
    });
}

function addTodo() {
    const input = document.getElementById('todoInput');
    const text = input.value.trim();
    if (!text) return;
    todos.push({ text, completed: false });
    input.value = '';
    save();
    render();
}

function toggleTodo(index) {
    todos[index].completed = !todos[index].completed;
    save();
    render();
}

function deleteTodo(index) {
    todos.splice(index, 1);
    save();
    render();
}

document.getElementById('addBtn').addEventListener('click', addTodo);
document.getElementById('todoInput').addEventListener('keypress', (e) => {
    if (e.key === 'Enter') addTodo();
});
render();
""",
        ),
        (
            "README.md",
            _readme(
                "Todo List App",
                "A simple todo list application that keeps tasks in local storage.",
                ["Add, complete and delete tasks", "Tasks persist across reloads"],
            ),
        ),
    ),
)

WEATHER = Template(
    name="Weather App",
    language="JavaScript",
    files=(
        (
            "index.html",
            _page(
                "Weather App",
                """    <div class="weather-container">
        <h1>Weather App</h1>
        <input type="text" id="cityInput" placeholder="Enter city name...">
        <button onclick="getWeather()">Search</button>
        <div id="temperature"></div>
        <div id="description"></div>
    </div>""",
                "weather.js",
            ),
        ),
        (
            "weather.js",
            """const demoData = {
    london: { temp: 18, desc: 'Cloudy' },
    paris: { temp: 22, desc: 'Sunny' },
    tokyo: { temp: 25, desc: 'Partly Cloudy' },
};

function getWeather() {
    const city = document.getElementById('cityInput').value.toLowerCase().trim();
    if (!city) {
        alert('Please enter a city name');
        return;
    }
    const data = demoData[city] || { temp: 20, desc: 'Clear' };
    document.getElementById('temperature').textContent = `${data.temp}\\u00b0C`;
    document.getElementById('description').textContent = `${data.desc} in ${city}`;
}

document.getElementById('cityInput').addEventListener('keypress', (e) => {
    if (e.key === 'Enter') getWeather();
});
""",
        ),
        (
            "README.md",
            _readme(
                "Weather App",
                "A weather lookup page using built-in demo data.",
                ["Search by city name", "Demo data for London, Paris and Tokyo"],
            ),
        ),
    ),
)

TIMER = Template(
    name="Timer App",
    language="JavaScript",
    files=(
        (
            "index.html",
            _page(
                "Timer App",
                """    <div class="timer">
        <h1>Countdown Timer</h1>
        <input type="number" id="minutes" min="0" placeholder="Minutes">
        <input type="number" id="seconds" min="0" max="59" placeholder="Seconds">
        <div id="timerDisplay">00:00</div>
        <button onclick="startTimer()">Start</button>
        <button onclick="pauseTimer()">Pause</button>
        <button onclick="resetTimer()">Reset</button>
    </div>""",
                "timer.js",
            ),
        ),
        (
            "timer.js",
            """let timerInterval = null;
let totalSeconds = 0;

function updateDisplay() {
    const minutes = Math.floor(totalSeconds / 60).toString().padStart(2, '0');
    const seconds = (totalSeconds % 60).toString().padStart(2, '0');
    document.getElementById('timerDisplay').textContent = `${minutes}:${seconds}`;
}

function startTimer() {
    if (timerInterval) return;
    if (totalSeconds === 0) {
        const minutes = parseInt(document.getElementById('minutes').value) || 0;
        const seconds = parseInt(document.getElementById('seconds').value) || 0;
        totalSeconds = minutes * 60 + seconds;
    }
    if (totalSeconds <= 0) return;
    timerInterval = setInterval(() => {
        totalSeconds--;
        updateDisplay();
        if (totalSeconds <= 0) {
            pauseTimer();
            alert("Time's up!");
        }
    }, 1000);
}

function pauseTimer() {
    clearInterval(timerInterval);
    timerInterval = null;
}

function resetTimer() {
    pauseTimer();
    totalSeconds = 0;
    updateDisplay();
}

updateDisplay();
""",
        ),
        (
            "README.md",
            _readme(
                "Timer App",
                "A simple countdown timer application.",
                ["Set minutes and seconds", "Start, pause, and reset", "Alert when time is up"],
            ),
        ),
    ),
)

BASIC_WEB_APP = Template(
    name="Basic Web App",
    language="JavaScript",
    files=(
        (
            "index.html",
            _page(
                "Generated App",
                "    <h1>Welcome to Your Generated App</h1>",
                "script.js",
                stylesheet=True,
            ),
        ),
        (
            "style.css",
            "body { font-family: Arial, sans-serif; margin: 40px; background: #f5f5f5; }\n"
            "h1 { color: #333; }\n",
        ),
        (
            "script.js",
            "document.addEventListener('DOMContentLoaded', () => {\n"
            "    console.log('App loaded successfully!');\n"
            "});\n",
        ),
        (
            "README.md",
            _readme(
                "Generated Web App",
                "This app was generated from a voice request.",
                ["Static HTML, CSS and JavaScript starter"],
            ),
        ),
    ),
)

# Ordered: the first intent with a matching keyword wins
INTENTS: tuple[tuple[tuple[str, ...], Template], ...] = (
    (("calculator", "calc"), CALCULATOR),
    (("todo", "task"), TODO_LIST),
    (("weather",), WEATHER),
    (("timer", "countdown"), TIMER),
)

DEFAULT_TEMPLATE = BASIC_WEB_APP


def find_template(transcript: str) -> Template:
    """Classify a transcript into a template by keyword."""
    lowered = transcript.lower()
    for keywords, template in INTENTS:
        if any(keyword in lowered for keyword in keywords):
            return template
    return DEFAULT_TEMPLATE
