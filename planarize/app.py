#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Planarize (pygame edition): drag the nodes until no two edges cross.

How to run
----------
$ planarize --difficulty hard
$ python -m planarize --new --nodes 8

Requires: Python 3.9+, numpy, pygame.

Controls
--------
- Drag a node with the mouse or one finger.
- "New" (N): random graph with 5-10 nodes.  "Reset" (R): new 6-node graph.
- "Hint" (H): flash the node involved in the most crossings.
- "Auto-Solve" (A): let the solver untangle the graph.
- Quit: press ESC or close the window.

The current game is saved continuously and resumed on the next start unless
--new is given. Every solved graph is appended to the history file.
"""
import argparse
import asyncio
import logging

import pygame

from .game import DEFAULT_NODES, PlanarityGame
from .generator import set_seed
from .geometry import edge_is_crossed
from .storage import JsonStore

logger = logging.getLogger(__name__)

# --------------------------- Configuration ------------------------------------

WINDOW_W, WINDOW_H = 960, 720
MIN_BOARD_W, MIN_BOARD_H = 300, 240
UI_H = 72  # bottom UI bar height
FPS = 60

BG_COLOR = (0, 0, 10)
BAR_COLOR = (18, 18, 32)
EDGE_OK = (100, 255, 160)
EDGE_CROSSED = (255, 80, 80)
PLANAR_COLOR = (255, 250, 240)
SUCCESS_TEXT = (120, 255, 150)
TEXT_COLOR = (230, 230, 240)
HUD_COLOR = (255, 215, 150)
BTN_TEXT = (20, 20, 22)
BTN_BG = (235, 235, 240)
BTN_BG_HOVER = (215, 215, 225)
BTN_BORDER = (180, 180, 190)
BTN_BG_DISABLED = (90, 90, 100)
BTN_TEXT_DISABLED = (150, 150, 160)

EDGE_W = 3

DEFAULT_STORE_DIR = "~/.planarize"

# ------------------------------- UI helpers ------------------------------------


class Button:
    """A labelled bar button; greyed out and unclickable while not `enabled`."""

    def __init__(self, label, rect=(0, 0, 0, 0)):
        self.label = label
        self.rect = pygame.Rect(rect)
        self.hover = False
        self.enabled = True

    def draw(self, surf, font):
        if not self.enabled:
            fill, fg = BTN_BG_DISABLED, BTN_TEXT_DISABLED
        else:
            fill, fg = (BTN_BG_HOVER if self.hover else BTN_BG), BTN_TEXT
        pygame.draw.rect(surf, fill, self.rect, border_radius=10)
        pygame.draw.rect(surf, BTN_BORDER, self.rect, width=1, border_radius=10)
        label = font.render(self.label, True, fg)
        surf.blit(label, label.get_rect(center=self.rect.center))

    def hit(self, pos):
        return self.enabled and self.rect.collidepoint(pos)

# ------------------------------- Renderer --------------------------------------


class PygameRenderer:
    """Draws the board (top) and the button bar (bottom). Board pixels are game coordinates."""

    def __init__(self, game: PlanarityGame, screen):
        self.game = game
        self.screen = screen
        self.font = pygame.font.SysFont("Arial", 18)
        self.small = pygame.font.SysFont("Arial", 14)
        self.title = pygame.font.SysFont("Arial", 26, bold=True)
        self.layout_ui()

    def layout_ui(self):
        w, h = self.screen.get_size()
        y0 = max(h - UI_H + 14, 14)
        btn_w = 140
        btn_h = 44
        pad = 16
        labels = ["New", "Reset", "Hint", "Auto-Solve"]
        if not hasattr(self, "btns"):
            self.btns = {label: Button(label, (0, 0, btn_w, btn_h)) for label in labels}
        for i, label in enumerate(labels):
            self.btns[label].rect.update(pad + i * (btn_w + pad), y0, btn_w, btn_h)

    def buttons(self):
        return list(self.btns.values())

    def button_at(self, pos):
        for label, btn in self.btns.items():
            if btn.hit(pos):
                return label
        return None

    def draw(self):
        s = self.game.session
        m = self.game.metrics or self.game.refresh()
        planar = m.crossings == 0
        w, h = self.screen.get_size()
        self.screen.fill(BG_COLOR)

        # Edges
        for a, b in s.edges:
            if planar:
                color = PLANAR_COLOR
            else:
                color = EDGE_CROSSED if edge_is_crossed(s.pos, s.edges, (a, b)) else EDGE_OK
            A = (int(round(s.pos[a][0])), int(round(s.pos[a][1])))
            B = (int(round(s.pos[b][0])), int(round(s.pos[b][1])))
            if A != B:
                pygame.draw.line(self.screen, color, A, B, width=EDGE_W)

        # Nodes
        r = int(round(s.radius))
        for i, (x, y) in enumerate(s.pos):
            color = PLANAR_COLOR if planar else s.colors[i]
            center = (int(round(x)), int(round(y)))
            pygame.draw.circle(self.screen, color, center, r)
            if i == self.game.selected:
                pygame.draw.circle(self.screen, TEXT_COLOR, center, r + 4, width=2)

        if planar:
            txt = self.title.render("Planar Graph Achieved!", True, SUCCESS_TEXT)
            self.screen.blit(txt, (max(20, w // 2 - txt.get_width() // 2), 90))

        # --- Stats & HUD
        stats = (f"Moves: {s.moves}    Time: {s.timer}s    Score: {m.score}    "
                 f"Planarity: {m.planarity}%    Crossings: {m.crossings}")
        self.screen.blit(self.font.render(stats, True, TEXT_COLOR), (16, 10))
        solver = self.game.solver.state.value if self.game.solver is not None else "idle"
        hud = (f"Complexity: {m.complexity}    Balance: {m.balance}    "
               f"Difficulty: {s.difficulty}    Solver: {solver}")
        self.screen.blit(self.small.render(hud, True, HUD_COLOR), (16, 36))

        # --- UI buttons bar
        pygame.draw.rect(self.screen, BAR_COLOR, pygame.Rect(0, h - UI_H, w, UI_H))
        self.btns["Auto-Solve"].enabled = not self.game.solving
        mouse_pos = pygame.mouse.get_pos()
        for btn in self.buttons():
            btn.hover = btn.hit(mouse_pos)
            btn.draw(self.screen, self.font)

# --------------------------------- App -----------------------------------------


def board_size(w, h):
    return max(MIN_BOARD_W, w), max(MIN_BOARD_H, h - UI_H)


class App:
    def __init__(self, difficulty="Easy", store_dir=DEFAULT_STORE_DIR, force_new=False,
                 nodes=None, seed=None):
        pygame.init()
        pygame.display.set_caption("Planarize")
        self.screen = pygame.display.set_mode((WINDOW_W, WINDOW_H), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.seed = set_seed(seed)
        bw, bh = board_size(*self.screen.get_size())
        self.game = PlanarityGame(bw, bh, difficulty=difficulty, store=JsonStore(store_dir))
        if nodes is not None:
            self.game.new_graph(nodes)
        else:
            self.game.load_or_generate(force_new=force_new)
        self.renderer = PygameRenderer(self.game, self.screen)
        self.finger = None  # id of the finger driving the drag

    def on_button(self, label):
        if label == "New":
            self.game.new_random_graph()
        elif label == "Reset":
            self.game.new_graph(DEFAULT_NODES)
        elif label == "Hint":
            self.game.hint()
        elif label == "Auto-Solve":
            self.game.auto_solve()

    def on_press(self, pos):
        label = self.renderer.button_at(pos)
        if label is not None:
            self.on_button(label)
        else:
            self.game.start_drag(*pos)

    def finger_pos(self, event):
        w, h = self.screen.get_size()
        return (event.x * w, event.y * h)

    def handle(self, event):
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            label = {pygame.K_n: "New", pygame.K_r: "Reset",
                     pygame.K_h: "Hint", pygame.K_a: "Auto-Solve"}.get(event.key)
            if label:
                self.on_button(label)
        # Touch also produces synthetic mouse events; fingers are handled below.
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and not getattr(event, "touch", False):
            self.on_press(event.pos)
        elif event.type == pygame.MOUSEMOTION and not getattr(event, "touch", False):
            self.game.drag(*event.pos)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1 and not getattr(event, "touch", False):
            self.game.end_drag()
        elif event.type == pygame.WINDOWLEAVE:
            self.game.end_drag()
        elif event.type == pygame.FINGERDOWN and self.finger is None:
            self.finger = event.finger_id
            self.on_press(self.finger_pos(event))
        elif event.type == pygame.FINGERMOTION and event.finger_id == self.finger:
            self.game.drag(*self.finger_pos(event))
        elif event.type == pygame.FINGERUP and event.finger_id == self.finger:
            self.finger = None
            self.game.end_drag()
        elif event.type == pygame.VIDEORESIZE:
            self.screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
            self.renderer.screen = self.screen
            self.renderer.layout_ui()
            self.game.resize(*board_size(event.w, event.h))
        return True

    async def run(self):
        running = True
        while running:
            dt = self.clock.tick(FPS)
            for event in pygame.event.get():
                if not self.handle(event):
                    running = False
                    break

            self.game.update(dt)
            self.renderer.draw()
            pygame.display.flip()

            await asyncio.sleep(0)
        pygame.quit()

# --------------------------------- Main ----------------------------------------


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="planarize", description="Untangle a random graph.")
    p.add_argument("--difficulty", default="Easy",
                   help="difficulty label; contains 'expert' -> x1.6, 'hard' -> x1.3")
    p.add_argument("--new", action="store_true", help="ignore the saved game and start fresh")
    p.add_argument("--nodes", type=int, default=None, help="node count for a fresh graph")
    p.add_argument("--seed", type=int, default=None, help="random seed")
    p.add_argument("--store-dir", default=DEFAULT_STORE_DIR,
                   help="directory for the saved game and history (default: %(default)s)")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = p.parse_args(argv)
    if args.nodes is not None and args.nodes < 1:
        p.error("--nodes must be at least 1")
    return args


async def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")
    app = App(difficulty=args.difficulty, store_dir=args.store_dir, force_new=args.new,
              nodes=args.nodes, seed=args.seed)
    logger.info("seed %d", app.seed)
    await app.run()


def cli():
    asyncio.run(main())


if __name__ == "__main__":
    cli()
