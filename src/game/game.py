# src/game/game.py
import sys, argparse
from typing import Optional
import pygame
from pygame import K_ESCAPE, K_r, K_UP, K_DOWN
from .config import (
    WIDTH, HEIGHT, FPS, LR_DEFAULT, LR_MIN, LR_MAX, LR_STEP,
    COLOR_FG, COLOR_ACCENT, COLOR_PANEL
)
from .simulation import Simulation, clamp_learning_rate, parse_learning_rate


def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("--learning-rate", type=parse_learning_rate, default=LR_DEFAULT,
                   help=f"Initial learning rate, clamped to [{LR_MIN}, {LR_MAX}].")
    p.add_argument("--sprite", type=str, default="snowboarder.png",
                   help="Rider image. Falls back to a plain rectangle if it can't be loaded.")
    p.add_argument("--fps", type=int, default=FPS)
    p.add_argument("--debug", action="store_true", help="Print rider status twice per second.")
    return p.parse_args()


def load_sprite(path: str) -> Optional[pygame.Surface]:
    try:
        return pygame.image.load(path).convert_alpha()
    except (pygame.error, FileNotFoundError) as e:
        print(f"Sprite '{path}' unavailable ({e}); drawing a rectangle instead.")
        return None


class Slider:
    """Horizontal slider bound to [LR_MIN, LR_MAX]."""

    def __init__(self, rect: pygame.Rect):
        self.rect = rect
        self.dragging = False

    def value_at(self, x: int) -> float:
        t = (x - self.rect.left) / max(1, self.rect.width)
        value = LR_MIN + t * (LR_MAX - LR_MIN)
        return clamp_learning_rate(round(value / LR_STEP) * LR_STEP)

    def handle(self, event, sim: Simulation):
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.inflate(0, 16).collidepoint(event.pos):
                self.dragging = True
                sim.learning_rate = self.value_at(event.pos[0])
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.dragging = False
        elif event.type == pygame.MOUSEMOTION and self.dragging:
            sim.learning_rate = self.value_at(event.pos[0])

    def draw(self, surf: pygame.Surface, value: float):
        pygame.draw.rect(surf, COLOR_PANEL, self.rect, border_radius=3)
        t = (value - LR_MIN) / (LR_MAX - LR_MIN)
        knob_x = self.rect.left + int(t * self.rect.width)
        pygame.draw.circle(surf, COLOR_ACCENT, (knob_x, self.rect.centery), 8)


def run():
    args = parse_args()

    pygame.init()
    pygame.display.set_caption("Snowboard Descent")
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("jetbrainsmono", 18)
    big_font = pygame.font.SysFont("jetbrainsmono", 36)

    sim = Simulation(learning_rate=args.learning_rate)
    sprite = load_sprite(args.sprite)

    slider = Slider(pygame.Rect(WIDTH - 220, 18, 180, 8))
    btn_w, btn_h = 180, 50
    reset_rect = pygame.Rect((WIDTH - btn_w)//2, HEIGHT//2 + 30, btn_w, btn_h)

    _print_timer = 0.0 if args.debug else None

    while True:
        dt = clock.tick(args.fps) / 1000.0
        if dt > 1.0 / 30.0:  # clamp stalls
            dt = 1.0 / 30.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit(); sys.exit()
            if event.type == pygame.KEYDOWN:
                if event.key == K_ESCAPE:
                    pygame.quit(); sys.exit()
                if event.key == K_r:
                    sim.reset()
                if event.key == K_UP:
                    sim.learning_rate = clamp_learning_rate(sim.learning_rate + LR_STEP)
                if event.key == K_DOWN:
                    sim.learning_rate = clamp_learning_rate(sim.learning_rate - LR_STEP)
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and sim.state.finished:
                if reset_rect.collidepoint(event.pos):
                    sim.reset()
            slider.handle(event, sim)

        sim.advance(dt)

        if _print_timer is not None:
            _print_timer -= dt
            if _print_timer <= 0.0:
                _print_timer = 0.5
                r = sim.rider
                print(f"x={r.x:.1f} y={r.y:.1f} vx={r.vx:+.2f} vy={r.vy:+.2f} "
                      f"m={r.momentum:.1f} ground={r.on_ground} score={sim.state.score:.1f}")

        # --- Render ---
        sim.draw(screen, sprite)

        for i, line in enumerate(sim.status().lines()):
            screen.blit(font.render(line, True, COLOR_FG), (12, 10 + i * 22))
        slider.draw(screen, sim.learning_rate)
        screen.blit(font.render("UP/DOWN or drag: learning rate | R reset | ESC quit", True, COLOR_FG),
                    (12, HEIGHT - 26))

        if sim.state.finished:
            overlay = pygame.Surface((WIDTH, HEIGHT), pygame.SRCALPHA)
            if sim.state.game_over:
                overlay.fill((0, 0, 0, 180))
                msg = "Crashed! Press R"
            else:
                overlay.fill((0, 255, 0, 76))
                msg = "You reached the lodge!"
            screen.blit(overlay, (0, 0))
            txt = big_font.render(msg, True, (255, 255, 255))
            screen.blit(txt, (WIDTH//2 - txt.get_width()//2, HEIGHT//2 - txt.get_height()))

            pygame.draw.rect(screen, COLOR_PANEL, reset_rect, border_radius=10)
            pygame.draw.rect(screen, (90, 130, 180), reset_rect, width=2, border_radius=10)
            btn_txt = font.render("Reset (R)", True, (220, 235, 255))
            screen.blit(btn_txt, (reset_rect.centerx - btn_txt.get_width()//2,
                                  reset_rect.centery - btn_txt.get_height()//2))

        pygame.display.flip()

if __name__ == "__main__":
    run()
