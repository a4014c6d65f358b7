"""Test helpers for objcgen - a recording bridge and generated-module loading."""

import importlib
import types
import uuid
from pathlib import Path

from objcgen.config import GeneratorSettings
from objcgen.generators import write_class_modules
from objcgen.models import ExtractionResult

SAMPLE_HEADER = """\
#import <AppKit/AppKit.h>

NS_ASSUME_NONNULL_BEGIN

/*!
 @abstract A rectangular region that draws content.
 */
API_AVAILABLE(macos(10.0))
@interface View : NSObject <NSCoding> {
    NSInteger _tag;
}

/*! The view's title. */
@property (nonatomic, copy, nullable) NSString *title;

@property (nonatomic, readonly) NSInteger tag;

@property (nonatomic, getter=isHidden) BOOL hidden;

/*!
 Creates a view with a frame.
 @param frame The frame rectangle.
 @return An initialized view.
 */
- (instancetype)initWithFrame:(CGRect)frame;
- (instancetype)initWithFrame:(CGRect)frame andFlags:(NSUInteger)flags;

- (void)addSubview:(View *)view;
- (void)addSubview:(View *)view
        positioned:(NSInteger)place
        relativeTo:(nullable View *)other;

+ (instancetype)viewWithFrame:(CGRect)frame;

- (void)setOpacity:(CGFloat)opacity;

@end

@interface Button : View

- (void)setTarget:(nullable id)target;
- (nullable id)target;
+ (Button *)buttonWithTitle:(NSString *)title target:(nullable id)target action:(SEL)action;

@end

@protocol ViewDelegate <NSObject>
- (void)viewDidLoad:(View *)view;
@end

NS_ASSUME_NONNULL_END
"""


class FakeBridge(types.ModuleType):
    """
    Stand-in for the runtime bridge module.

    Records every allocate/invoke call so tests can assert which selector a
    generated binding forwarded to.
    """

    def __init__(self, name: str = "objc_bridge"):
        super().__init__(name)
        self.calls: list[tuple] = []
        self.results: dict[str, object] = {}

    def lookup_class(self, name: str) -> str:
        return f"<class {name}>"

    def allocate(self, native_class):
        self.calls.append(("allocate", native_class))
        return f"<alloc {native_class}>"

    def invoke(self, target, selector: str, *args):
        self.calls.append((target, selector, args))
        return self.results.get(selector, f"<{selector}>")

    @property
    def selectors(self) -> list[str]:
        """Selectors invoked so far, in call order."""
        return [call[1] for call in self.calls if call[0] != "allocate"]


def load_generated(
    result: ExtractionResult,
    root: Path,
    settings: GeneratorSettings | None = None,
) -> dict[str, type]:
    """
    Write bindings for result into a fresh package under root and import them.

    root must already be on sys.path.

    Returns the generated classes by name.
    """
    package = f"gen_{uuid.uuid4().hex[:8]}"
    settings = (settings or GeneratorSettings()).model_copy(
        update={"output_dir": root / package}
    )
    write_class_modules(result, settings)

    importlib.invalidate_caches()

    classes = {}
    for cls in result.classes:
        module = importlib.import_module(f"{package}.{cls.name}")
        classes[cls.name] = getattr(module, cls.name)
    return classes
